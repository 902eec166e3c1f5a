class AllowAllAuthorization:
    """Authorization adapter for deployments that authenticate upstream."""

    def is_allowed(self, action: str, resource: str) -> bool:
        return True


class StaticAuthorization:
    """Allows exactly the configured actions."""

    def __init__(self, allowed_actions: set[str]) -> None:
        self.allowed_actions = allowed_actions

    def is_allowed(self, action: str, resource: str) -> bool:
        return action in self.allowed_actions
