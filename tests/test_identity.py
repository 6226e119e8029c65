"""Tests for artifact identity normalization."""

import pytest

from zerotrace.models.artifact import FileArtifact, PrefetchArtifact, RegistryArtifact
from zerotrace.normalizer import IdentityNormalizer, normalize_identity


def _file(path: str) -> FileArtifact:
    return FileArtifact(search="s", path=path, mtime="2023-01-01 10:00:00")


class TestFileIdentity:
    def test_windows_profile_replaced(self):
        assert normalize_identity("file", _file(r"C:\Users\mike\Downloads\evil.exe")) == "USER/Downloads/evil.exe"

    def test_any_profile_under_users(self):
        assert normalize_identity("file", _file(r"C:\Users\Administrator\Desktop\evil.exe")) == (
            "USER/Desktop/evil.exe"
        )
        assert normalize_identity("file", _file(r"C:\Users\alice\AppData\evil.dll")) == "USER/AppData/evil.dll"

    def test_profile_root_case_insensitive(self):
        assert normalize_identity("file", _file(r"C:\USERS\bob\Temp\a.exe")) == "USER/Temp/a.exe"

    def test_unix_home(self):
        assert normalize_identity("file", _file("/home/bob/.cache/evil")) == "USER/.cache/evil"

    def test_non_profile_path_kept(self):
        assert normalize_identity("file", _file(r"C:\Windows\System32\drivers\evil.sys")) == (
            "System32/drivers/evil.sys"
        )

    def test_explicit_profile_token(self):
        normalizer = IdentityNormalizer(profile_tokens=["svc_backup"])
        assert normalizer.normalize("file", _file(r"D:\data\svc_backup\tools\nc.exe")) == "USER/tools/nc.exe"

    def test_short_path_reduces_to_name(self):
        assert normalize_identity("file", _file(r"C:\evil.exe")) == "evil.exe"
        assert normalize_identity("file", _file(r"C:\Temp\evil.exe")) == "evil.exe"
        assert normalize_identity("file", _file("evil.exe")) == "evil.exe"

    def test_empty_segments_ignored(self):
        assert normalize_identity("file", _file(r"C:\\Users\\mike\\\\Downloads\\evil.exe")) == (
            "USER/Downloads/evil.exe"
        )

    def test_separator_styles_converge(self):
        windows = normalize_identity("file", _file(r"C:\Users\mike\Downloads\evil.exe"))
        mixed = normalize_identity("file", _file("C:/Users/alice/Downloads/evil.exe"))
        assert windows == mixed


class TestOtherModules:
    def test_registry_key_separators(self):
        artifact = RegistryArtifact(search="s", key=r"Software\Microsoft\Run\evil", last_write="x")
        assert normalize_identity("registry", artifact) == "Software/Microsoft/Run/evil"

    def test_prefetch_exe_name(self):
        artifact = PrefetchArtifact(search="s", exe_name="EVIL.EXE", exec_date="x")
        assert normalize_identity("prefetch", artifact) == "EVIL.EXE"

    def test_mismatched_module(self):
        artifact = PrefetchArtifact(search="s", exe_name="EVIL.EXE", exec_date="x")
        with pytest.raises(ValueError):
            normalize_identity("file", artifact)


class TestProfileSegment:
    def test_parent_rule(self):
        normalizer = IdentityNormalizer()
        assert normalizer.is_profile_segment("anyone", parent="Users")
        assert not normalizer.is_profile_segment("anyone", parent="Program Files")
        assert not normalizer.is_profile_segment("anyone")

    def test_custom_roots(self):
        normalizer = IdentityNormalizer(profile_roots=["Profiles"])
        assert normalizer.file_identity(r"C:\Profiles\x\Temp\a.exe") == "USER/Temp/a.exe"
        assert normalizer.file_identity(r"C:\Users\x\Temp\a.exe") == "x/Temp/a.exe"
