# ridr/core/i18n.py
"""
Localized texts for component output.

Resources follow the ``{locale: {namespace: {key: text}}}`` layout and
come from the ``resources`` option and/or ``<resource_dir>/<locale>.json``
files. Lookups fall back from ``en-US`` to ``en`` to the fallback locale,
and finally to the key itself.

Options:
    resources: inline resources
    resource_dir: directory with one JSON file per locale
    fallback_locale: default "en"
    default_namespace: default "translation"
"""
from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Optional

from ridr.core.utils import deep_merge, merged
from ridr.infra.logging_config import get_logger

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


class I18n:
    def __init__(self, options: Optional[dict] = None):
        self.options = dict(options or {})
        self.fallback_locale: str = self.options.get("fallback_locale", "en")
        self.default_namespace: str = self.options.get("default_namespace", "translation")
        self.resources: dict[str, dict] = {}
        self.initialized = False

    async def initialize(self) -> None:
        resources = merged(self.options.get("resources"))
        resource_dir = self.options.get("resource_dir")
        if resource_dir:
            loaded = await asyncio.to_thread(self._load_dir, Path(resource_dir))
            deep_merge(resources, loaded)
        self.resources = resources
        self.initialized = True
        logger.info(f"i18n initialized: locales={sorted(resources)}")

    @staticmethod
    def _load_dir(directory: Path) -> dict[str, dict]:
        if not directory.is_dir():
            raise FileNotFoundError(f"i18n resource_dir does not exist: {directory}")
        resources: dict[str, dict] = {}
        for path in sorted(directory.glob("*.json")):
            with path.open(encoding="utf-8") as f:
                resources[path.stem] = json.load(f)
        return resources

    def translate(self, key: str, locale: Optional[str] = None, **args: Any) -> str:
        """
        Resolve *key* (``"ns:a.b"`` or ``"a.b"``) for *locale*.

        ``{{name}}`` placeholders are replaced from *args*; unknown
        placeholders are left as they are.
        """
        namespace, _, dotted = key.rpartition(":")
        namespace = namespace or self.default_namespace

        for candidate in self._locale_chain(locale):
            value = _lookup(self.resources.get(candidate, {}).get(namespace), dotted)
            if isinstance(value, list) and value:
                value = value[0]
            if isinstance(value, str):
                return _interpolate(value, args)

        logger.debug(f"Missing translation: key={key}, locale={locale}")
        return key

    def _locale_chain(self, locale: Optional[str]) -> list[str]:
        chain: list[str] = []
        if locale:
            chain.append(locale)
            language = locale.split("-")[0]
            if language != locale:
                chain.append(language)
        if self.fallback_locale not in chain:
            chain.append(self.fallback_locale)
        return chain


def _lookup(tree: Any, dotted: str) -> Any:
    node = tree
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _interpolate(text: str, args: dict[str, Any]) -> str:
    def replace(match: re.Match) -> str:
        value = _lookup(args, match.group(1))
        return match.group(0) if value is None else str(value)

    return _PLACEHOLDER.sub(replace, text)
