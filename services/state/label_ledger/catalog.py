"""Label catalog stored in the labeler service record on Bluesky."""

from __future__ import annotations

from threading import Lock

from packages.labeler_shared.logging import get_logger
from resources.adapters.bluesky import (
    BlueskyAdapter,
    BlueskyAdapterDependencyError,
    LabelLocale,
    LabelValueDefinition,
)
from services.state.label_ledger.config import LabelLedgerSettings
from services.state.label_ledger.domain import LabelDefinition
from services.state.label_ledger.interfaces import LabelCatalog

_LOGGER = get_logger(__name__)


class BlueskyLabelCatalog(LabelCatalog):
    """Create-if-absent label definitions on ``app.bsky.labeler.service/self``."""

    def __init__(
        self,
        *,
        adapter: BlueskyAdapter,
        settings: LabelLedgerSettings,
    ) -> None:
        self._adapter = adapter
        self._settings = settings
        self._lock = Lock()

    def ensure_definition(self, definition: LabelDefinition) -> LabelDefinition:
        """Create ``definition`` when absent; return the stored definition.

        A lost ``swapRecord`` race is resolved by re-reading the record: when
        the other writer created the same identifier the call is a no-op.
        """
        with self._lock:
            record = self._adapter.get_labeler_service()
            existing = record.definition(definition.identifier)
            if existing is not None:
                return _from_value_definition(existing)

            created = self._to_value_definition(definition)
            try:
                self._adapter.put_labeler_service(
                    record=record,
                    definitions=(*record.definitions, created),
                )
            except BlueskyAdapterDependencyError:
                reread = self._adapter.get_labeler_service().definition(
                    definition.identifier
                )
                if reread is None:
                    raise
                return _from_value_definition(reread)

            _LOGGER.info("Created label definition %s", definition.identifier)
            return definition

    def _to_value_definition(self, definition: LabelDefinition) -> LabelValueDefinition:
        return LabelValueDefinition(
            identifier=definition.identifier,
            severity=self._settings.definition_severity,
            blurs=self._settings.definition_blurs,
            default_setting=self._settings.definition_default_setting,
            adult_only=self._settings.definition_adult_only,
            locales=(
                LabelLocale(
                    lang=self._settings.definition_locale,
                    name=definition.name,
                    description=definition.description,
                ),
            ),
        )


def _from_value_definition(value: LabelValueDefinition) -> LabelDefinition:
    description = value.locales[0].description if value.locales else ""
    return LabelDefinition(
        identifier=value.identifier,
        name=value.name,
        description=description,
    )
