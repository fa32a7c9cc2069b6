"""Select the transcription backend and its credentials at transcription time."""

from __future__ import annotations

import logging
from typing import Mapping

from errors import MissingCredentialError, ProviderError, SettingsLoadError
from interfaces import Transcriber
from models import DEFAULT_LANGUAGE, Provider, ResolvedProvider, Settings
from settings_cache import SettingsCache

logger = logging.getLogger(__name__)


def _derive(settings: Settings) -> ResolvedProvider:
    provider = settings.provider
    language = None
    if provider.requires_language:
        language = (settings.language_code or "").strip() or DEFAULT_LANGUAGE
    return ResolvedProvider(
        provider=provider,
        credential=settings.credential_for(provider),
        language_code=language,
    )


class ProviderResolver:
    def __init__(
        self,
        cache: SettingsCache,
        transcribers: Mapping[Provider, Transcriber],
    ) -> None:
        self._cache = cache
        self._transcribers = dict(transcribers)

    def resolve(self, settings: Settings) -> ResolvedProvider:
        """Return provider, credential and language for ``settings``.

        When the selected provider has no credential the cache is reloaded
        exactly once, since the key may have been saved moments ago without
        a change notification reaching us yet.
        """
        resolved = _derive(settings)
        if resolved.credential:
            return resolved

        logger.info("No %s credential cached, reloading settings", resolved.provider.value)
        try:
            refreshed = self._cache.reload()
        except SettingsLoadError:
            raise MissingCredentialError(resolved.provider)

        resolved = _derive(refreshed)
        if resolved.credential:
            return resolved
        raise MissingCredentialError(resolved.provider)

    def transcriber_for(self, provider: Provider) -> Transcriber:
        try:
            return self._transcribers[provider]
        except KeyError:
            raise ProviderError(f"No transcriber configured for {provider.value}") from None

    def is_configured(self, settings: Settings) -> bool:
        return bool(settings.credential_for(settings.provider))
