"""Unit tests for price and discount backing stores."""
import random
import threading
import pytest
import redis
from decimal import Decimal
from unittest.mock import Mock

from pricing_calculator.infrastructure.catalog import load_discount_table, load_price_catalog
from pricing_calculator.infrastructure.redis import RedisPriceRepository
from pricing_calculator.infrastructure.repositories import (
    DEFAULT_CUSTOMER_DISCOUNTS,
    DiscountRepository,
    InMemoryPriceRepository,
)


class TestInMemoryPriceRepository:
    """Test InMemoryPriceRepository."""

    def test_known_price(self):
        """Test lookup of a stored price."""
        repo = InMemoryPriceRepository({"article-1": Decimal("1.50")})

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")

    def test_unknown_price_without_generation(self):
        """Test miss returns None when generation is off."""
        repo = InMemoryPriceRepository({"article-1": Decimal("1.50")})

        assert repo.find_price_by_article_id("article-2") is None

    def test_generated_price_in_range(self):
        """Test generated prices stay within [0.50, 30.00)."""
        repo = InMemoryPriceRepository(generate_missing=True, rng=random.Random(42))

        for i in range(200):
            price = repo.find_price_by_article_id(f"article-{i}")
            assert Decimal("0.50") <= price < Decimal("30.00")

    def test_generated_price_is_stable(self):
        """Test the same article always gets the same generated price."""
        repo = InMemoryPriceRepository(generate_missing=True)

        first = repo.find_price_by_article_id("article-5")

        assert repo.find_price_by_article_id("article-5") == first

    def test_generation_uses_configured_range(self):
        """Test price_min and price_spread bound generated prices."""
        rng = Mock()
        rng.random.return_value = 0.5
        repo = InMemoryPriceRepository(
            generate_missing=True, price_min=Decimal("2"), price_spread=Decimal("10"), rng=rng
        )

        assert repo.find_price_by_article_id("article-1") == Decimal("7.0")

    def test_catalog_price_wins_over_generation(self):
        """Test known prices are never replaced by generated ones."""
        repo = InMemoryPriceRepository({"article-1": Decimal("1.50")}, generate_missing=True)

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")

    def test_input_table_is_copied(self):
        """Test generated prices do not leak into the caller's table."""
        table = {"article-1": Decimal("1.50")}
        repo = InMemoryPriceRepository(table, generate_missing=True)

        repo.find_price_by_article_id("article-2")

        assert table == {"article-1": Decimal("1.50")}

    def test_concurrent_first_lookups_agree(self):
        """Test threads racing on a new article see one price."""
        repo = InMemoryPriceRepository(generate_missing=True)
        results = []

        def lookup():
            results.append(repo.find_price_by_article_id("article-7"))

        threads = [threading.Thread(target=lookup) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 1


class TestDiscountRepository:
    """Test DiscountRepository."""

    def test_default_table(self):
        """Test built-in reference discounts."""
        repo = DiscountRepository()

        assert repo.find_discount_by_customer_id("customer-1") == Decimal("0.90")
        assert repo.find_discount_by_customer_id("customer-2") == Decimal("0.85")

    def test_unknown_customer_has_no_discount(self):
        """Test absence means no discount."""
        assert DiscountRepository().find_discount_by_customer_id("customer-3") is None

    def test_custom_table(self):
        """Test a supplied table replaces the defaults."""
        repo = DiscountRepository({"customer-9": Decimal("0.5")})

        assert repo.find_discount_by_customer_id("customer-9") == Decimal("0.5")
        assert repo.find_discount_by_customer_id("customer-1") is None

    def test_default_table_not_mutated(self):
        """Test defaults are shared read-only."""
        DiscountRepository()._discounts["customer-1"] = Decimal("0.1")

        assert DEFAULT_CUSTOMER_DISCOUNTS["customer-1"] == Decimal("0.90")


class TestCatalog:
    """Test CSV table loading."""

    def test_load_price_catalog(self, tmp_path):
        """Test prices are read exactly, keys stripped."""
        path = tmp_path / "prices.csv"
        path.write_text("article_id,price\narticle-1,1.50\n article-2 ,0.58\narticle-3,9.990\n")

        prices = load_price_catalog(str(path))

        assert prices == {
            "article-1": Decimal("1.50"),
            "article-2": Decimal("0.58"),
            "article-3": Decimal("9.990"),
        }
        assert str(prices["article-1"]) == "1.50"

    def test_blank_rows_skipped(self, tmp_path):
        """Test rows without a key or value are ignored."""
        path = tmp_path / "prices.csv"
        path.write_text("article_id,price\narticle-1,1.50\n,2.00\narticle-2,\n")

        assert load_price_catalog(str(path)) == {"article-1": Decimal("1.50")}

    def test_missing_column(self, tmp_path):
        """Test a catalog without a price column is rejected."""
        path = tmp_path / "prices.csv"
        path.write_text("article_id,cost\narticle-1,1.50\n")

        with pytest.raises(ValueError, match="missing column"):
            load_price_catalog(str(path))

    @pytest.mark.parametrize("value", ["abc", "NaN", "-1.00"])
    def test_bad_price(self, value, tmp_path):
        """Test malformed and negative prices are rejected."""
        path = tmp_path / "prices.csv"
        path.write_text(f"article_id,price\narticle-1,{value}\n")

        with pytest.raises(ValueError):
            load_price_catalog(str(path))

    def test_load_discount_table(self, tmp_path):
        """Test discount factors are read exactly."""
        path = tmp_path / "discounts.csv"
        path.write_text("customer_id,discount\ncustomer-1,0.90\ncustomer-7,1\n")

        assert load_discount_table(str(path)) == {
            "customer-1": Decimal("0.90"),
            "customer-7": Decimal("1"),
        }

    @pytest.mark.parametrize("factor", ["0", "1.10", "-0.5"])
    def test_discount_outside_range(self, factor, tmp_path):
        """Test factors outside (0, 1] are rejected."""
        path = tmp_path / "discounts.csv"
        path.write_text(f"customer_id,discount\ncustomer-1,{factor}\n")

        with pytest.raises(ValueError, match="outside"):
            load_discount_table(str(path))


class TestRedisPriceRepository:
    """Test RedisPriceRepository."""

    def test_first_price_is_stored(self, fake_redis):
        """Test a fresh price is saved under the prefixed key."""
        source = InMemoryPriceRepository({"article-1": Decimal("1.50")})
        repo = RedisPriceRepository(source, fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")
        assert fake_redis.store == {"price:article-1": "1.50"}

    def test_stored_price_is_shared(self, fake_redis):
        """Test a second worker reads the first worker's generated price."""
        worker_a = RedisPriceRepository(InMemoryPriceRepository(generate_missing=True), fake_redis)
        worker_b = RedisPriceRepository(InMemoryPriceRepository(generate_missing=True), fake_redis)

        price = worker_a.find_price_by_article_id("article-5")

        assert worker_b.find_price_by_article_id("article-5") == price

    def test_cache_hit_skips_source(self, fake_redis):
        """Test cached prices are served without asking the source."""
        fake_redis.store["price:article-1"] = "4.20"
        source = Mock(spec=["find_price_by_article_id"])
        repo = RedisPriceRepository(source, fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("4.20")
        source.find_price_by_article_id.assert_not_called()

    def test_lost_race_returns_winner(self, fake_redis):
        """Test SET NX losing returns the price already stored."""
        source = Mock(spec=["find_price_by_article_id"])

        def racing_lookup(article_id):
            fake_redis.store["price:article-1"] = "3.33"
            return Decimal("9.99")

        source.find_price_by_article_id.side_effect = racing_lookup
        repo = RedisPriceRepository(source, fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("3.33")

    def test_missing_article_not_cached(self, fake_redis):
        """Test a miss stays a miss and writes nothing."""
        repo = RedisPriceRepository(InMemoryPriceRepository(), fake_redis)

        assert repo.find_price_by_article_id("article-404") is None
        assert fake_redis.store == {}

    def test_malformed_cached_value_discarded(self, fake_redis):
        """Test garbage in Redis is replaced by the source's price."""
        fake_redis.store["price:article-1"] = "not-a-price"
        repo = RedisPriceRepository(InMemoryPriceRepository({"article-1": Decimal("1.50")}), fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")
        assert fake_redis.store == {"price:article-1": "1.50"}

    def test_redis_read_failure_falls_back(self, fake_redis):
        """Test Redis outage serves the source's price."""
        fake_redis.get.side_effect = redis.ConnectionError("down")
        repo = RedisPriceRepository(InMemoryPriceRepository({"article-1": Decimal("1.50")}), fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")

    def test_redis_write_failure_falls_back(self, fake_redis):
        """Test a failed save still returns the price."""
        fake_redis.set.side_effect = redis.ConnectionError("down")
        repo = RedisPriceRepository(InMemoryPriceRepository({"article-1": Decimal("1.50")}), fake_redis)

        assert repo.find_price_by_article_id("article-1") == Decimal("1.50")
