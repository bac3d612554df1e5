import pytest

from app.models.currency import Currency
from app.services.errors import CurrencyNotFound, ProviderUnavailable, ResultOutOfRange
from app.services.rates.conversion import ConversionEngine, cross_convert
from app.services.rates.resolver import RateResolver
from conftest import FakeProvider, FakeStore


def _engine(cache, store, provider):
    return ConversionEngine(RateResolver(cache, store, provider))


def test_usd_to_eur_example(cache, store, provider):
    result = _engine(cache, store, provider).convert("USD", "EUR", 100.0)

    assert result.result == pytest.approx(85.0)
    assert result.from_rate == 1.0
    assert result.to_rate == 0.85
    assert (result.from_currency, result.to_currency) == ("USD", "EUR")


@pytest.mark.parametrize(
    "amount,from_rate,to_rate",
    [(100.0, 1.0, 0.85), (42.5, 5.0, 0.85), (1e6, 0.000016, 110.0), (3.0, 0.73, 0.73)],
)
def test_cross_rate_formula(amount, from_rate, to_rate):
    assert cross_convert(amount, from_rate, to_rate) == amount / from_rate * to_rate


def test_result_is_reproducible_for_same_rates(cache, provider):
    store = FakeStore([Currency(code="BRL", rate=5.0), Currency(code="EUR", rate=0.85)])
    engine = _engine(cache, store, provider)

    first = engine.convert("BRL", "EUR", 42.5).result
    second = engine.convert("BRL", "EUR", 42.5).result
    assert first == second == 42.5 / 5.0 * 0.85


def test_zero_amount_is_zero(cache, store, provider):
    assert _engine(cache, store, provider).convert("BRL", "EUR", 0.0).result == 0.0


def test_zero_amount_still_resolves_and_fails_on_unknown(cache, store, provider):
    with pytest.raises(CurrencyNotFound):
        _engine(cache, store, provider).convert("USD", "XYZ", 0.0)


def test_from_failure_short_circuits(cache, store):
    provider = FakeProvider(error="timeout")
    engine = _engine(cache, store, provider)

    with pytest.raises(ProviderUnavailable):
        engine.convert("USD", "EUR", 10.0)
    assert provider.calls == 1


def test_same_currency_is_identity(cache, store, provider):
    result = _engine(cache, store, provider).convert("EUR", "EUR", 12.34)
    assert result.result == pytest.approx(12.34)


def test_overflowing_result_is_rejected(cache, store):
    provider = FakeProvider({"BTC": 0.000016, "JPY": 110.0})

    with pytest.raises(ResultOutOfRange) as exc:
        _engine(cache, store, provider).convert("BTC", "JPY", 1e305)
    assert exc.value.status_code == 400
