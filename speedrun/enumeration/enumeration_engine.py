"""Lists the models on each host and keeps only the ones that validate."""
from typing import Any, Dict, List, Optional

from speedrun.const import (
    CAPABILITIES_FIELD,
    DETAILS_FIELD,
    FAMILY_FIELD,
    MODELS_FIELD,
    MS_PER_SECOND,
    NAME_FIELD,
    PARAMETER_SIZE_FIELD,
    QUANTIZATION_LEVEL_FIELD,
    SIZE_FIELD,
)
from speedrun.shared.config import Config
from speedrun.shared.exceptions import EnumerationError, InvalidResponseFormatError, SpeedrunError
from speedrun.shared.logging import EventType, LoggingManager, event
from speedrun.shared.models import HostAddress, ModelDescriptor
from speedrun.shared.ollama_client import OllamaClient


logger = LoggingManager.get_logger(__name__)


def _as_size(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return 0


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class EnumerationEngine:
    """Builds the list of runnable (host, model) pairs.

    Hosts are handled one after another; within a host the list call comes
    first and each listed model is then validated with a show call.
    """

    def __init__(self, config: Config, client: OllamaClient):
        self.config = config
        self.client = client

    @property
    def timeout_s(self) -> float:
        return self.config.enum_timeout_ms / MS_PER_SECOND

    async def enumerate(self, hosts: List[HostAddress]) -> List[ModelDescriptor]:
        """
        Enumerate validated models across hosts.

        Args:
            hosts: Hosts returned by discovery.

        Returns:
            Descriptors in host order, then in each host's list order. A host
            that cannot be listed contributes nothing; an empty result is valid.
        """
        models: List[ModelDescriptor] = []
        for host in hosts:
            try:
                listed = await self.list_host_models(host)
            except SpeedrunError as e:
                logger.error(f"Failed to enumerate {host.hostname}: {e}", extra=event(EventType.ERROR))
                continue

            for entry in listed:
                descriptor = await self.validate_model(host, entry)
                if descriptor is not None:
                    models.append(descriptor)
        return models

    async def list_host_models(self, host: HostAddress) -> List[Dict[str, Any]]:
        """Fetch the raw model entries a host advertises.

        Raises:
            EnumerationError: If the list is missing or malformed.
            RequestError: On transport failure, timeout, or non-success status.
        """
        data = await self.client.list_models(host.address, self.timeout_s)
        listed = data.get(MODELS_FIELD)
        if not isinstance(listed, list):
            raise EnumerationError(f"no '{MODELS_FIELD}' list in response")
        return [
            entry for entry in listed
            if isinstance(entry, dict) and isinstance(entry.get(NAME_FIELD), str) and entry[NAME_FIELD]
        ]

    async def validate_model(self, host: HostAddress, entry: Dict[str, Any]) -> Optional[ModelDescriptor]:
        """Validate one listed model with a show call; None means skipped."""
        name = entry[NAME_FIELD]
        try:
            show_data = await self.client.show_model(host.address, name, self.timeout_s)
        except InvalidResponseFormatError as e:
            logger.info(f"  {name} on {host.hostname}: skipped ({e})", extra=event(EventType.INFO))
            return None
        except SpeedrunError as e:
            reason = e if getattr(e, "status_code", None) else f"model unreachable or removed: {e}"
            logger.info(f"  {name} on {host.hostname}: skipped ({reason})", extra=event(EventType.INFO))
            return None

        descriptor = self.build_descriptor(host, entry, show_data)
        logger.info(
            f"  {descriptor.name} ({descriptor.parameter_size}, {descriptor.quantization}) on {host.hostname}",
            extra=event(EventType.INFO),
        )
        return descriptor

    @staticmethod
    def build_descriptor(host: HostAddress, entry: Dict[str, Any], show_data: Dict[str, Any]) -> ModelDescriptor:
        """Build a descriptor; fields of the wrong type count as missing."""
        details = entry.get(DETAILS_FIELD)
        if not isinstance(details, dict):
            details = {}
        capabilities = show_data.get(CAPABILITIES_FIELD)
        if not isinstance(capabilities, list):
            capabilities = []
        return ModelDescriptor(
            host=host,
            name=entry[NAME_FIELD],
            size_bytes=_as_size(entry.get(SIZE_FIELD)),
            parameter_size=_as_text(details.get(PARAMETER_SIZE_FIELD)),
            quantization=_as_text(details.get(QUANTIZATION_LEVEL_FIELD)),
            family=_as_text(details.get(FAMILY_FIELD)),
            capabilities=tuple(c for c in capabilities if isinstance(c, str)),
        )
