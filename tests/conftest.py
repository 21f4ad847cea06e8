import json

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from garage_models import Base, Bolt, Car, Garage, Tire
from schema_ancestry import ParentFinder
from schema_factory import GARAGE_TABLES, make_graph


@pytest.fixture
def garage_graph():
    return make_graph(GARAGE_TABLES, name="garage")


@pytest.fixture
def schema_file(tmp_path):
    payload = {
        "name": "garage",
        "tables": [
            {"name": "Garage", "primary_key": ["id"], "key_type": "int"},
            {
                "name": "Car",
                "primary_key": ["id"],
                "key_type": "int",
                "relationships": [{"name": "garage", "target": "Garage"}],
            },
            {
                "name": "Tire",
                "primary_key": "id",
                "relationships": [{"name": "car", "target": "Car"}],
            },
            {
                "name": "Bolt",
                "primary_key": ["id"],
                "relationships": [{"name": "tire", "target": "Tire"}],
            },
        ],
    }
    path = tmp_path / "garage.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        car = Car(
            make="Kia",
            garage=Garage(name="Main Street"),
            tires=[
                Tire(brand="First Tire Brand", bolts=[Bolt(), Bolt(), Bolt()]),
                Tire(brand="Second Tire Brand", bolts=[Bolt(), Bolt(), Bolt()]),
            ],
        )
        session.add(car)
        session.commit()
        yield session
    engine.dispose()


@pytest.fixture
def finder():
    return ParentFinder.from_models(Base)


@pytest.fixture
def first_tire_bolt_ids(session):
    tire = session.scalars(select(Tire).filter_by(brand="First Tire Brand")).one()
    return [bolt.id for bolt in tire.bolts]
