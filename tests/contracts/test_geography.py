"""Tests for city, airport and distance contracts."""

import pytest
from pydantic import ValidationError

from airport.contracts.geography import AirportCreate, AirportUpdate, CityCreate, DistanceRequest


class TestAirportContracts:
    def test_codes_upper_cased(self):
        airport = AirportCreate(name="Charles de Gaulle", iata_code="cdg", icao_code="lfpg", city_id=1)
        assert airport.iata_code == "CDG"
        assert airport.icao_code == "LFPG"

    @pytest.mark.parametrize("code", ["CD", "CDGX", "C1G"])
    def test_invalid_iata(self, code):
        with pytest.raises(ValidationError):
            AirportCreate(name="X", iata_code=code, city_id=1)

    def test_update_only_tracks_given_fields(self):
        assert AirportUpdate(iata_code="ory").changes() == {"iata_code": "ORY"}

    def test_coordinates_bounded(self):
        with pytest.raises(ValidationError):
            AirportCreate(name="X", iata_code="XXX", city_id=1, latitude=91)


class TestCityCreate:
    def test_minimal(self):
        city = CityCreate(city_name="Paris", country="France")
        assert city.region is None

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            CityCreate(city_name="", country="France")


class TestDistanceRequest:
    def test_ids_or_codes(self):
        DistanceRequest(from_airport_id=1, to_iata="jfk")
        DistanceRequest(from_iata="CDG", to_airport_id=2)

    def test_requires_origin(self):
        with pytest.raises(ValidationError, match="from_airport_id or from_iata"):
            DistanceRequest(to_iata="JFK")

    def test_requires_destination(self):
        with pytest.raises(ValidationError, match="to_airport_id or to_iata"):
            DistanceRequest(from_airport_id=1)
