"""
Demo data seeding: standard locations, a sample fleet and general pricing.

Each table is seeded only when it is empty, so running the seed twice is a
no-op. Used by `scripts/seed_demo_data.py` and, when the demo data flag is
on, at application startup.
"""

import logging
from decimal import Decimal
from typing import Dict

from sqlalchemy.orm import Session

from rental.db import models
from rental.db.repositories import fleet as fleet_repo
from rental.db.repositories import pricing as pricing_repo
from rental.domain.fleet import FuelType, Location, TransmissionType, Vehicle, VehicleCategory
from rental.domain.pricing import PricingPolicy
from rental.domain.shared import Money

logger = logging.getLogger(__name__)

LOCATIONS = [
    ("BER-HBF", "Berlin Hauptbahnhof", "Europaplatz 1", "Berlin", "10557"),
    ("MUC-FLG", "München Flughafen", "Nordallee 25", "München", "85356"),
    ("FRA-FLG", "Frankfurt Flughafen", "Hugo-Eckener-Ring 1", "Frankfurt am Main", "60549"),
    ("HAM-HBF", "Hamburg Hauptbahnhof", "Hachmannplatz 16", "Hamburg", "20099"),
    ("CGN-HBF", "Köln Hauptbahnhof", "Trankgasse 11", "Köln", "50667"),
]

DAILY_RATES = {
    VehicleCategory.KLEIN: Decimal("29.99"),
    VehicleCategory.KOMPAKT: Decimal("39.99"),
    VehicleCategory.MITTEL: Decimal("54.99"),
    VehicleCategory.OBER: Decimal("89.99"),
    VehicleCategory.SUV: Decimal("69.99"),
    VehicleCategory.KOMBI: Decimal("49.99"),
    VehicleCategory.TRANS: Decimal("79.99"),
    VehicleCategory.LUXUS: Decimal("149.99"),
}

# name, category, location, net rate, seats, fuel, transmission, manufacturer, model, year
FLEET = [
    ("VW Up!", VehicleCategory.KLEIN, "BER-HBF", "29.99", 4, FuelType.PETROL, TransmissionType.MANUAL, "Volkswagen", "Up!", 2023),
    ("Toyota Aygo", VehicleCategory.KLEIN, "CGN-HBF", "30.99", 4, FuelType.HYBRID, TransmissionType.AUTOMATIC, "Toyota", "Aygo X", 2024),
    ("VW Golf", VehicleCategory.KOMPAKT, "BER-HBF", "49.99", 5, FuelType.DIESEL, TransmissionType.MANUAL, "Volkswagen", "Golf 8", 2024),
    ("Audi A3", VehicleCategory.KOMPAKT, "FRA-FLG", "62.99", 5, FuelType.PETROL, TransmissionType.AUTOMATIC, "Audi", "A3 Sportback", 2024),
    ("VW Passat", VehicleCategory.MITTEL, "MUC-FLG", "69.99", 5, FuelType.DIESEL, TransmissionType.AUTOMATIC, "Volkswagen", "Passat", 2023),
    ("BMW 3er", VehicleCategory.MITTEL, "HAM-HBF", "79.99", 5, FuelType.PETROL, TransmissionType.AUTOMATIC, "BMW", "320i", 2024),
    ("Mercedes E-Klasse", VehicleCategory.OBER, "FRA-FLG", "99.99", 5, FuelType.DIESEL, TransmissionType.AUTOMATIC, "Mercedes-Benz", "E 220 d", 2024),
    ("BMW 5er", VehicleCategory.OBER, "MUC-FLG", "104.99", 5, FuelType.HYBRID, TransmissionType.AUTOMATIC, "BMW", "530e", 2024),
    ("VW Tiguan", VehicleCategory.SUV, "BER-HBF", "79.99", 5, FuelType.PETROL, TransmissionType.AUTOMATIC, "Volkswagen", "Tiguan", 2024),
    ("Audi Q5", VehicleCategory.SUV, "CGN-HBF", "94.99", 5, FuelType.DIESEL, TransmissionType.AUTOMATIC, "Audi", "Q5", 2023),
    ("Skoda Octavia Combi", VehicleCategory.KOMBI, "HAM-HBF", "54.99", 5, FuelType.DIESEL, TransmissionType.MANUAL, "Skoda", "Octavia Combi", 2023),
    ("VW Passat Variant", VehicleCategory.KOMBI, "FRA-FLG", "64.99", 5, FuelType.DIESEL, TransmissionType.AUTOMATIC, "Volkswagen", "Passat Variant", 2024),
    ("Mercedes Sprinter", VehicleCategory.TRANS, "BER-HBF", "89.99", 3, FuelType.DIESEL, TransmissionType.MANUAL, "Mercedes-Benz", "Sprinter", 2023),
    ("VW Multivan", VehicleCategory.TRANS, "MUC-FLG", "99.99", 7, FuelType.DIESEL, TransmissionType.AUTOMATIC, "Volkswagen", "Multivan", 2024),
    ("Porsche Taycan", VehicleCategory.LUXUS, "MUC-FLG", "199.99", 4, FuelType.ELECTRIC, TransmissionType.AUTOMATIC, "Porsche", "Taycan 4S", 2024),
    ("Mercedes S-Klasse", VehicleCategory.LUXUS, "FRA-FLG", "179.99", 5, FuelType.HYBRID, TransmissionType.AUTOMATIC, "Mercedes-Benz", "S 580 e", 2024),
]


def _is_empty(db: Session, model) -> bool:
    return db.query(model).first() is None


def seed_locations(db: Session, dry_run: bool = False) -> int:
    if not _is_empty(db, models.Location):
        logger.info("Locations already present; skipping location seed")
        return 0
    if not dry_run:
        for code, name, street, city, postal_code in LOCATIONS:
            fleet_repo.create_location(db, Location.create(code, name, street, city, postal_code))
    logger.info("Seeded %d locations%s", len(LOCATIONS), " (dry run)" if dry_run else "")
    return len(LOCATIONS)


def seed_fleet(db: Session, dry_run: bool = False) -> int:
    if not _is_empty(db, models.Vehicle):
        logger.info("Vehicles already present; skipping fleet seed")
        return 0
    if not dry_run:
        for name, category, location, rate, seats, fuel, transmission, manufacturer, model, year in FLEET:
            fleet_repo.create_vehicle(db, Vehicle.create(
                name=name,
                category=category,
                location_code=location,
                daily_rate=Money.euro(Decimal(rate)),
                seats=seats,
                fuel_type=fuel,
                transmission_type=transmission,
                manufacturer=manufacturer,
                model=model,
                year=year,
            ))
    logger.info("Seeded %d vehicles%s", len(FLEET), " (dry run)" if dry_run else "")
    return len(FLEET)


def seed_pricing(db: Session, dry_run: bool = False) -> int:
    if not _is_empty(db, models.PricingPolicy):
        logger.info("Pricing policies already present; skipping pricing seed")
        return 0
    if not dry_run:
        for category, rate in DAILY_RATES.items():
            pricing_repo.create_policy(db, PricingPolicy(category=category, daily_rate=Money.euro(rate)))
    logger.info("Seeded %d pricing policies%s", len(DAILY_RATES), " (dry run)" if dry_run else "")
    return len(DAILY_RATES)


def seed_demo_data(db: Session, dry_run: bool = False) -> Dict[str, int]:
    """Seed every table in dependency order; returns rows added per table."""
    return {
        "locations": seed_locations(db, dry_run=dry_run),
        "vehicles": seed_fleet(db, dry_run=dry_run),
        "pricing_policies": seed_pricing(db, dry_run=dry_run),
    }
