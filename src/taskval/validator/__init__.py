from taskval.validator.engine import CHECK_NAMES, CHECKS, ValidationEngine, run_validations

__all__ = ["CHECKS", "CHECK_NAMES", "ValidationEngine", "run_validations"]
