from __future__ import annotations

import pytest

from dotnet_packaging.errors import PackagingError
from dotnet_packaging.lib import msbuild
from dotnet_packaging.lib.msbuild import dotnet_executable, msbuild_arguments, parse_properties, restore, run_target


def test_msbuild_arguments_skip_blank_values():
    argv = msbuild_arguments(
        target="CreateRpm",
        properties=[("RuntimeIdentifier", "linux-x64"), ("TargetFramework", ""), ("Configuration", None)],
        project="app.csproj",
    )
    assert argv == ["msbuild", "/t:CreateRpm", "/p:RuntimeIdentifier=linux-x64", "app.csproj"]


def test_parse_properties_ignores_surrounding_noise():
    out = 'Restore succeeded.\n{\n  "Properties": {\n    "TargetFramework": "net8.0",\n    "ProjectAssetsFile": ""\n  }\n}\n'
    assert parse_properties(out) == {"TargetFramework": "net8.0", "ProjectAssetsFile": ""}


def test_parse_properties_skips_braces_in_log_lines():
    out = (
        'Target "Restore": $(ProjectGuid)="{6F1E0C3A-1B2C-4D5E-8F90-A1B2C3D4E5F6}"\n'
        '  {not json either}\n'
        '{\n  "Properties": {\n    "TargetFramework": "net8.0",\n    "ProjectAssetsFile": "obj/project.assets.json"\n  }\n}\n'
    )
    assert parse_properties(out) == {"TargetFramework": "net8.0", "ProjectAssetsFile": "obj/project.assets.json"}


@pytest.mark.parametrize("out", ["", "error MSB1009: Project file does not exist.", '{"Items": {}}'])
def test_parse_properties_rejects_other_output(out):
    with pytest.raises(ValueError):
        parse_properties(out)


def test_restore_command_line(fake_dotnet):
    restore("app.csproj", dotnet="dotnet", framework="net8.0", verbose=True)
    assert fake_dotnet.calls == [
        [
            "dotnet",
            "msbuild",
            "app.csproj",
            "-nologo",
            "-t:Restore",
            "-p:TargetFramework=net8.0",
            "-getProperty:TargetFramework",
            "-getProperty:ProjectAssetsFile",
            "-v:detailed",
        ]
    ]


def test_restore_without_framework_is_quiet(fake_dotnet):
    restore("app.csproj", dotnet="dotnet")
    argv = fake_dotnet.calls[0]
    assert not any(a.startswith("-p:") for a in argv)
    assert argv[-1] == "-v:quiet"


def test_dotnet_executable_resolution(monkeypatch):
    monkeypatch.delenv("DOTNET_HOST_PATH", raising=False)
    assert dotnet_executable() == "dotnet"
    monkeypatch.setenv("DOTNET_HOST_PATH", "/usr/share/dotnet/dotnet")
    assert dotnet_executable() == "/usr/share/dotnet/dotnet"
    assert dotnet_executable("/opt/dotnet/dotnet") == "/opt/dotnet/dotnet"


def test_missing_dotnet_is_reported(monkeypatch):
    def _missing(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(msbuild, "run_cmd", _missing)
    with pytest.raises(PackagingError) as ei:
        run_target("no-such-dotnet", ["msbuild", "/t:CreateDeb", "app.csproj"])
    assert "no-such-dotnet" in str(ei.value)
