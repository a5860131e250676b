"""Config validation errors."""
from directory_rbac.kernel.errors import ConfigError


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(
            0,
            {"reason": "Required setting is missing", "setting": setting_name},
            message=f"Required setting '{setting_name}' is missing",
        )
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            0,
            {"reason": reason, "setting": setting_name, "provided": value},
            message=f"Setting '{setting_name}' has invalid value {value!r}: {reason}",
        )
        self.setting_name = setting_name
        self.value = value


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
