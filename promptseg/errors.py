"""Exceptions raised by the prompt-to-mask decoding pipeline."""


class PromptSegError(Exception):
    """Base class for all promptseg errors."""


class InvalidPromptError(PromptSegError, ValueError):
    """The prompt cannot be encoded (empty, mismatched or bad labels)."""


class MissingOutputError(PromptSegError, RuntimeError):
    """The inference engine did not return an expected output tensor."""

    def __init__(self, name, available=()):
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Output '{name}' not found in inference results; "
            f"available outputs: {self.available}. "
            "Check the output_names section of the config."
        )


class ShapeMismatchError(PromptSegError, ValueError):
    """A tensor does not match the decoder's fixed shape contract."""
