#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных.

Создает таблицы и, с флагом --seed, справочники брендов и вариантов.
"""

import sys
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import SessionLocal, engine
from app.db.models import Base, Brand, Variant, VariantType

# Справочник вариантов: тип -> значения
VARIANT_SEED = {
    ("Size", "size"): ["S", "M", "L", "XL"],
    ("Color", "color"): ["Black", "White", "Red"],
}

BRAND_SEED = ["Generic"]


def seed_references(db: Session) -> int:
    """Добавляет отсутствующие записи справочников. Возвращает число новых записей."""
    created = 0

    for name in BRAND_SEED:
        if db.scalar(select(Brand).where(Brand.name == name)) is None:
            db.add(Brand(name=name))
            created += 1

    for (type_name, type_code), values in VARIANT_SEED.items():
        variant_type = db.scalar(select(VariantType).where(VariantType.type == type_code))
        if variant_type is None:
            variant_type = VariantType(name=type_name, type=type_code)
            db.add(variant_type)
            db.flush()
            created += 1

        existing = set(
            db.scalars(select(Variant.name).where(Variant.variant_type_id == variant_type.id))
        )
        for value in values:
            if value not in existing:
                db.add(Variant(name=value, variant_type_id=variant_type.id))
                created += 1

    db.commit()
    return created


def init_database(seed: bool = False) -> bool:
    """Создает все таблицы в базе данных."""
    print("🗄️ Инициализация базы данных...")

    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Все таблицы созданы успешно!")

        tables = inspect(engine).get_table_names()
        print(f"📋 Таблиц в базе: {len(tables)}")
        for table in tables:
            print(f"  - {table}")

        if seed:
            with SessionLocal() as db:
                created = seed_references(db)
            print(f"🌱 Добавлено записей справочников: {created}")

        return True

    except SQLAlchemyError as e:
        print(f"❌ Ошибка инициализации базы: {e}")
        return False


if __name__ == "__main__":
    success = init_database(seed="--seed" in sys.argv[1:])
    if not success:
        sys.exit(1)
