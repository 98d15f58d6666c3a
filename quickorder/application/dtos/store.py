"""DTOs for store administration use cases."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreCreate:
    """Input for creating a store. store_id doubles as the display name."""

    store_id: str
    vpa: str
    merchant_name: str
    owner_email: str | None = None
    owner_phone: str | None = None


@dataclass(frozen=True)
class StoreSettingsUpdate:
    """Partial settings update; None leaves a field unchanged. store_id and name are immutable."""

    vpa: str | None = None
    merchant_name: str | None = None
    is_active: bool | None = None
    owner_email: str | None = None
    owner_phone: str | None = None

    def changed_fields(self) -> dict[str, object]:
        """Attribute name -> new value for every field that is set."""
        return {
            key: value
            for key, value in (
                ("vpa", self.vpa),
                ("merchant_name", self.merchant_name),
                ("is_active", self.is_active),
                ("owner_email", self.owner_email),
                ("owner_phone", self.owner_phone),
            )
            if value is not None
        }
