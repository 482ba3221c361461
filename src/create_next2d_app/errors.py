from __future__ import annotations


class CreateAppError(RuntimeError):
    pass


class ConfigError(CreateAppError):
    pass


class InvalidProjectName(CreateAppError):
    def __init__(self, message: str, *, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])


class TemplateError(CreateAppError):
    pass
