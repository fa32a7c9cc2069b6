from __future__ import annotations

import pytest

from errors import MissingCredentialError, ProviderError, SettingsLoadError
from fakes import FakeStore, FakeTranscriber, settings_with
from models import Provider, ResolvedProvider
from provider_resolver import ProviderResolver
from settings_cache import SettingsCache


def _resolver(store: FakeStore) -> ProviderResolver:
    return ProviderResolver(
        SettingsCache(store),
        {Provider.OPENAI: FakeTranscriber(), Provider.GOOGLE: FakeTranscriber()},
    )


def test_present_credential_resolves_without_reload() -> None:
    store = FakeStore()
    resolver = _resolver(store)

    resolved = resolver.resolve(settings_with(openai_key="  sk-abc  "))

    assert resolved == ResolvedProvider(Provider.OPENAI, "sk-abc", None)
    assert store.loads == 0


def test_google_empty_language_defaults_to_en_us() -> None:
    resolver = _resolver(FakeStore())

    resolved = resolver.resolve(
        settings_with(provider=Provider.GOOGLE, google_key="g", language_code="")
    )

    assert resolved.language_code == "en-US"


def test_google_keeps_configured_language() -> None:
    resolver = _resolver(FakeStore())

    resolved = resolver.resolve(
        settings_with(provider=Provider.GOOGLE, google_key="g", language_code="ja-JP")
    )

    assert resolved.language_code == "ja-JP"


def test_missing_credential_reloads_exactly_once() -> None:
    store = FakeStore(settings_with(openai_key=""))
    resolver = _resolver(store)

    with pytest.raises(MissingCredentialError) as info:
        resolver.resolve(settings_with(openai_key=""))

    assert store.loads == 1
    assert info.value.provider == Provider.OPENAI
    assert "openai" in str(info.value)


def test_whitespace_credential_counts_as_missing() -> None:
    store = FakeStore(settings_with(openai_key="sk-fresh"))
    resolver = _resolver(store)

    resolved = resolver.resolve(settings_with(openai_key="   "))

    assert resolved.credential == "sk-fresh"
    assert store.loads == 1


def test_reload_can_switch_provider() -> None:
    store = FakeStore(settings_with(provider=Provider.GOOGLE, google_key="g-key", language_code=""))
    resolver = _resolver(store)

    resolved = resolver.resolve(settings_with(openai_key=""))

    assert resolved.provider == Provider.GOOGLE
    assert resolved.credential == "g-key"
    assert resolved.language_code == "en-US"


def test_reload_failure_reports_missing_credential() -> None:
    store = FakeStore(error=SettingsLoadError("parse settings: boom"))
    resolver = _resolver(store)

    with pytest.raises(MissingCredentialError) as info:
        resolver.resolve(settings_with(provider=Provider.GOOGLE))

    assert info.value.provider == Provider.GOOGLE
    assert store.loads == 1


def test_is_configured() -> None:
    resolver = _resolver(FakeStore())

    assert resolver.is_configured(settings_with(openai_key="sk")) is True
    assert resolver.is_configured(settings_with(google_key="g")) is False


def test_transcriber_for_unregistered_provider_raises_provider_error() -> None:
    resolver = ProviderResolver(SettingsCache(FakeStore()), {Provider.OPENAI: FakeTranscriber()})

    with pytest.raises(ProviderError, match="No transcriber configured for google"):
        resolver.transcriber_for(Provider.GOOGLE)
