from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from idvmock.core.config import AppPaths, Settings


@dataclass(slots=True)
class CLIContext:
    paths: AppPaths
    settings: Settings
    console: Console
