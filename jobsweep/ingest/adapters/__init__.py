"""Job board adapters and the source id registry."""
from dataclasses import replace
from typing import Dict, List, Type

from ...exceptions import UnknownSourceError
from .base import BaseAdapter, CardAdapter, ScrapeState
from .careerbuilder import CareerBuilderAdapter
from .dice import DiceAdapter
from .glassdoor import GlassdoorAdapter
from .indeed import IndeedAdapter
from .jobbank import JobBankAdapter
from .linkedin import LinkedInAdapter
from .monster import MonsterAdapter
from .naukri import NaukriAdapter
from .reed import ReedAdapter
from .remoteok import RemoteOKAdapter
from .seek import SeekAdapter
from .simplyhired import SimplyHiredAdapter
from .stackoverflow import StackOverflowAdapter
from .weworkremotely import WeWorkRemotelyAdapter
from .ziprecruiter import ZipRecruiterAdapter

ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    adapter.source_id: adapter
    for adapter in (
        IndeedAdapter,
        LinkedInAdapter,
        GlassdoorAdapter,
        RemoteOKAdapter,
        WeWorkRemotelyAdapter,
        StackOverflowAdapter,
        DiceAdapter,
        MonsterAdapter,
        ZipRecruiterAdapter,
        CareerBuilderAdapter,
        SimplyHiredAdapter,
        ReedAdapter,
        SeekAdapter,
        JobBankAdapter,
        NaukriAdapter,
    )
}


def available_sources() -> List[str]:
    """Source ids that have an adapter, in registry order."""
    return list(ADAPTERS)


def create_adapter(source_id: str, **kwargs) -> BaseAdapter:
    """Instantiate the adapter for a source id.

    Keyword arguments naming ScraperConfig fields (``headless``,
    ``user_agents``, ...) override the board's default config; the rest are
    passed to the adapter constructor.

    Raises:
        UnknownSourceError: If no adapter is registered for ``source_id``
    """
    key = source_id.lower().strip()
    if key not in ADAPTERS:
        raise UnknownSourceError(f"No adapter registered for source '{source_id}'")

    adapter_cls = ADAPTERS[key]
    config_fields = set(adapter_cls.default_config.__dataclass_fields__)
    overrides = {name: kwargs.pop(name) for name in list(kwargs) if name in config_fields}
    if overrides:
        kwargs["config"] = replace(kwargs.get("config") or adapter_cls.default_config, **overrides)
    return adapter_cls(**kwargs)


__all__ = [
    "ADAPTERS",
    "BaseAdapter",
    "CardAdapter",
    "ScrapeState",
    "available_sources",
    "create_adapter",
    "CareerBuilderAdapter",
    "DiceAdapter",
    "GlassdoorAdapter",
    "IndeedAdapter",
    "JobBankAdapter",
    "LinkedInAdapter",
    "MonsterAdapter",
    "NaukriAdapter",
    "ReedAdapter",
    "RemoteOKAdapter",
    "SeekAdapter",
    "SimplyHiredAdapter",
    "StackOverflowAdapter",
    "WeWorkRemotelyAdapter",
    "ZipRecruiterAdapter",
]
