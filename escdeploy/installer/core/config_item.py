#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.


"""Base configuration item class for the deployment configurator.

This module provides the ConfigItem class that represents each setting the
configurator asks the operator for.
"""

from dataclasses import dataclass, field, InitVar
from typing import Any, Callable, Optional, Tuple, Union


@dataclass
class ConfigItem:
    """
    A single configurable value with all its associated data/metadata.

    Attributes:
        key: Unique conceptual identifier for the config item (always a KEY_CONFIG_ITEM_... constant)
        label: Human-readable display name for the item
        default_value: Initial/fallback value for the item
        value: Current configuration value
        is_modified: Whether the item has been modified via set_value
        validator: Callback to check if incoming value is valid
        choices: List of (tag, description) choices for the item
        is_password: Whether the field should be treated as sensitive
        accept_blank: Whether the field should accept a blank/empty value
        _question: Question to present to the operator (either a str or a callable)
        metadata: Extra information about the item
    """

    key: str
    label: str
    default_value: Any = None
    value: Any = field(init=False)
    validator: Optional[Callable[[Any], Union[bool, Tuple[bool, str]]]] = None
    choices: list = field(default_factory=list)
    is_modified: bool = False
    is_password: bool = False
    accept_blank: bool = False
    metadata: dict = field(default_factory=dict)

    # Use InitVar to accept `question` in __init__ but store internally as _question
    question: InitVar[Union[str, Callable[[], Any]]] = ""
    _question: Union[str, Callable[[], Any]] = field(init=False)

    def __post_init__(self, question):
        self.value = self.default_value
        self.is_modified = False
        self._question = question

    def validate(self, value: Any) -> Tuple[bool, str]:
        """Run the validator against a candidate value without storing it."""
        if isinstance(value, str) and not value.strip() and not self.accept_blank:
            return False, f"{self.label} cannot be empty"
        if self.validator:
            result = self.validator(value)
            # Handle different validator return types
            if isinstance(result, tuple):
                return result
            return result, ("" if result else "Invalid value")
        return True, ""

    def set_value(self, value: Any) -> Tuple[bool, str]:
        """Set and validate a new value.

        Args:
            value: The new value to set

        Returns:
            Tuple of (success, error_message)
        """
        valid, error = self.validate(value)
        if not valid:
            return False, error

        # set even if the value equals the default: an explicit choice is still a choice
        self.is_modified = True
        self.value = value
        return True, ""

    def get_value(self) -> Any:
        """Get the current value. Default is returned if value is None."""
        if self.value is None:
            return self.default_value
        return self.value

    def reset(self):
        """Reset value to default."""
        self.value = self.default_value
        self.is_modified = False

    @property
    def question(self) -> str:  # noqa: F811
        result = self._question() if callable(self._question) else self._question
        return "" if result is None else str(result)

    @question.setter
    def question(self, value: Union[str, Callable[[], Any]]):
        self._question = value
