"""Engine error kinds — local, non-retryable validation failures."""


class EffectError(ValueError):
    """Base class for every failure the engine reports to its caller."""


class InvalidDimensions(EffectError):
    """Width or height is zero, or the byte length is not width*height*4."""


class ParameterOutOfRange(EffectError):
    def __init__(self, effect: str, field: str, value, reason: str = ""):
        self.effect = effect
        self.field = field
        self.value = value
        msg = f"{effect}.{field}={value!r} is out of range"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class UnsupportedEffect(EffectError):
    def __init__(self, effect):
        self.effect = effect
        super().__init__(f"unknown effect: {effect}")
