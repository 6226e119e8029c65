"""Reporting run: decode, normalize, index and rank a batch of commands.

The run is single-threaded and processes commands in input order. The
timeline keeps the first occurrence per host, so input order decides
which occurrence a host is remembered by.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from zerotrace.analysis.patient_zero import first_seen, rank
from zerotrace.core import logging as log
from zerotrace.core.config import ReportConfig
from zerotrace.core.errors import DecodeError, ParseError, UnsupportedModuleError
from zerotrace.core.metrics import RunMetrics
from zerotrace.decoders import decode
from zerotrace.models.artifact import ArtifactDescriptor
from zerotrace.models.command import Command, ModuleKind
from zerotrace.models.error import ErrorCode, StructuredError
from zerotrace.models.metrics import RunSummary
from zerotrace.models.occurrence import ArtifactVerdict, HostScore, OccurrenceRecord
from zerotrace.normalizer.identity import IdentityNormalizer
from zerotrace.normalizer.timeline import ArtifactTimeline
from zerotrace.normalizer.timestamp import normalize_timestamp


@dataclass
class ReportRun:
    """Everything a finished run exposes to renderers."""

    config: ReportConfig
    commands: list[Command] = field(default_factory=list)
    records: list[OccurrenceRecord] = field(default_factory=list)
    timeline: ArtifactTimeline = field(default_factory=ArtifactTimeline)
    verdicts: list[ArtifactVerdict] = field(default_factory=list)
    ranking: list[HostScore] = field(default_factory=list)
    errors: list[StructuredError] = field(default_factory=list)
    summary: RunSummary | None = None

    @property
    def modules(self) -> list[ModuleKind]:
        """Configured modules, plus any other module that produced records."""
        seen = list(self.config.modules)
        for record in self.records:
            if record.module not in seen:
                seen.append(record.module)
        return seen

    @property
    def decode_errors(self) -> list[StructuredError]:
        return [e for e in self.errors if e.code == ErrorCode.DECODE_ERROR]

    @property
    def timestamp_errors(self) -> list[StructuredError]:
        return [e for e in self.errors if e.code == ErrorCode.TIMESTAMP_PARSE_ERROR]

    @property
    def patient_zero(self) -> HostScore | None:
        """Top-ranked host, if any host earned credit."""
        if self.ranking and self.ranking[0].score > 0:
            return self.ranking[0]
        return None


class ReportPipeline:
    """Runs commands through decoder, normalizers, timeline and ranker."""

    def __init__(self, config: ReportConfig | None = None):
        self.config = config or ReportConfig()
        self.identities = IdentityNormalizer(
            profile_tokens=self.config.profile_tokens,
            profile_roots=self.config.profile_roots,
        )
        self.metrics: RunMetrics | None = None
        self.result: ReportRun | None = None

    def run(self, commands: Iterable[Command], run_id: UUID | None = None) -> ReportRun:
        """Process a finite batch of commands.

        Decode failures skip the command; timestamp failures skip the
        occurrence. Both are recorded on the result.

        Args:
            commands: Commands to process, in order
            run_id: Correlation ID for this run (generated when None)

        Returns:
            Finished ReportRun

        Raises:
            ParseError: On the first bad timestamp when strict_timestamps is set
        """
        self.metrics = RunMetrics(run_id=run_id)
        result = ReportRun(config=self.config, commands=list(commands))
        self.result = result
        log.bind(run_id=str(self.metrics.run_id))
        try:
            self._index(result)
        finally:
            log.unbind("run_id")
        return result

    def _index(self, result: ReportRun) -> None:
        log.info("Processing commands", count=len(result.commands))

        progress = log.ProgressReporter(total=len(result.commands), description="Decoding")
        try:
            for command in result.commands:
                self._process_command(command, result)
                progress.update()
        except ParseError:
            progress.finish()
            self.metrics.complete(aborted=True)
            result.summary = self.metrics.to_summary(
                artifacts=len(result.timeline),
                hosts=len(result.timeline.hosts()),
            )
            log.error("Run aborted on unparseable timestamp")
            raise
        progress.finish()

        log.debug("Ranking hosts", artifacts=len(result.timeline))
        result.verdicts = first_seen(result.timeline)
        result.ranking = rank(result.timeline)

        self.metrics.complete()
        result.summary = self.metrics.to_summary(
            artifacts=len(result.timeline),
            hosts=len(result.timeline.hosts()),
        )
        log.info(
            "Run complete",
            artifacts=result.summary.artifacts_indexed,
            skipped_commands=result.summary.commands_skipped,
            timestamp_errors=result.summary.timestamp_errors,
        )

    def _process_command(self, command: Command, result: ReportRun) -> None:
        self.metrics.commands_seen += 1
        context = {
            "command_id": command.command_id,
            "action_id": command.action_id,
            "host": command.host,
        }

        try:
            descriptors = decode(command.module, command.payload)
        except (DecodeError, UnsupportedModuleError) as e:
            self.metrics.commands_skipped += 1
            result.errors.append(e.with_context(**context).to_structured())
            log.warning("Skipping command", reason=str(e), **context)
            return

        self.metrics.commands_decoded += 1
        log.debug("Decoded command", artifacts=len(descriptors), module=command.module.value, **context)

        for descriptor in descriptors:
            occurrence = self._to_occurrence(command, descriptor, result)
            if occurrence is None:
                continue
            result.records.append(occurrence)
            if result.timeline.insert(occurrence):
                self.metrics.occurrences_indexed += 1
            else:
                self.metrics.duplicates_dropped += 1
                log.debug("Duplicate occurrence dropped", identity=occurrence.identity, host=command.host)

    def _to_occurrence(
        self,
        command: Command,
        descriptor: ArtifactDescriptor,
        result: ReportRun,
    ) -> OccurrenceRecord | None:
        identity = self.identities.normalize(command.module, descriptor)
        try:
            timestamp = normalize_timestamp(command.module, descriptor.raw_time)
        except ParseError as e:
            e.with_context(
                command_id=command.command_id,
                host=command.host,
                identity=identity,
            )
            self.metrics.timestamp_errors += 1
            result.errors.append(e.to_structured())
            if self.config.strict_timestamps:
                raise
            log.warning("Dropping occurrence with unparseable time", identity=identity, value=descriptor.raw_time)
            return None

        return OccurrenceRecord(
            identity=identity,
            host=command.host,
            module=command.module,
            status=command.status,
            timestamp=timestamp,
            raw_time=descriptor.raw_time,
            command_id=command.command_id,
            action_id=command.action_id,
            search=descriptor.search,
            descriptor=descriptor,
            command=command,
        )


def run_report(commands: Iterable[Command], config: ReportConfig | None = None) -> ReportRun:
    """Run one report over ``commands`` with ``config``."""
    return ReportPipeline(config).run(commands)
