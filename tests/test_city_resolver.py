"""
Tests for CityResolver find-or-create.

Covers:
1. Existing city is returned, not duplicated
2. Unknown name creates a city with an empty postal code
3. Sequential resolution of the same new name is idempotent
4. Duplicate rows left behind by a race resolve to the oldest one
"""

import pytest

from app.models.city import City
from app.services.city_resolver import CityResolver


class TestResolveCityRef:
    """Test CityResolver.resolve_city_ref"""

    def test_returns_existing_city(self, test_db):
        """Known names resolve to their row"""
        lyon = City(name="Lyon", postal_code="69000")
        test_db.add(lyon)
        test_db.commit()

        city = CityResolver(test_db).resolve_city_ref("Lyon")

        assert city.ref_id == lyon.ref_id
        assert city.postal_code == "69000"
        assert test_db.query(City).count() == 1

    def test_creates_missing_city_with_empty_postal_code(self, test_db):
        """Unknown names are created on the fly"""
        city = CityResolver(test_db).resolve_city_ref("Nantes")
        test_db.commit()

        assert city.ref_id is not None
        assert city.id
        assert city.name == "Nantes"
        assert city.postal_code == ""

    def test_sequential_resolution_is_idempotent(self, test_db):
        """Two calls without a race point at the same row"""
        resolver = CityResolver(test_db)

        first = resolver.resolve_city_ref("Paris")
        second = resolver.resolve_city_ref("Paris")

        assert first.ref_id == second.ref_id
        assert test_db.query(City).filter(City.name == "Paris").count() == 1

    def test_name_match_is_exact(self, test_db):
        """Lookup is by exact name, so case variants are distinct cities"""
        resolver = CityResolver(test_db)

        paris = resolver.resolve_city_ref("Paris")
        lower = resolver.resolve_city_ref("paris")

        assert paris.ref_id != lower.ref_id

    def test_duplicates_from_a_race_resolve_to_oldest(self, test_db):
        """Name is not unique; a concurrent double insert is tolerated"""
        older = City(name="Lille", postal_code="")
        test_db.add(older)
        test_db.commit()
        newer = City(name="Lille", postal_code="")
        test_db.add(newer)
        test_db.commit()

        city = CityResolver(test_db).resolve_city_ref("Lille")

        assert city.ref_id == older.ref_id
        assert test_db.query(City).filter(City.name == "Lille").count() == 2
