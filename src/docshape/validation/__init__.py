# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Path validators and the document validation pass."""

from docshape.validation.runner import collect_errors, validate_document
from docshape.validation.validators import Validator, build_validators, is_required

__all__ = [
    # Validators
    "Validator",
    "build_validators",
    "is_required",
    # Validation pass
    "collect_errors",
    "validate_document",
]
