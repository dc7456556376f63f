class FormDebugError(Exception):
    """Base class for form debugger errors."""


class DocumentLoadError(FormDebugError):
    def __init__(self, path, reason):
        super().__init__(f"Could not load {path}: {reason}")
        self.path = path
        self.reason = reason


class SettingsError(FormDebugError):
    pass


class UnknownRuleError(FormDebugError):
    def __init__(self, rule_id, available):
        super().__init__(f"Unknown rule: {rule_id} (available: {', '.join(available)})")
        self.rule_id = rule_id
        self.available = list(available)
