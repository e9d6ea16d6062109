from importlib import metadata

import pytest


def test_console_script_points_at_main() -> None:
    try:
        dist = metadata.distribution("preview-unblock")
    except metadata.PackageNotFoundError:
        pytest.skip("package is not installed")

    scripts = {ep.name: ep for ep in dist.entry_points if ep.group == "console_scripts"}

    assert scripts["preview-unblock"].value == "preview_unblock.__main__:main"
