"""End-to-end find-parent tests against an in-memory SQLite database."""

import pytest
from sqlalchemy import select
from sqlalchemy.orm import aliased

from garage_models import Bolt, Car, CompositeBase, Garage, Lug, Tire, Unmapped, Wheel
from schema_ancestry import (
    CompositeKeyUnsupported,
    NoNavigationFound,
    NoRouteFound,
    ParentFinder,
    SchemaAncestryError,
    TypeNotMapped,
    find_parent,
)
from schema_ancestry import finder as finder_module
from schema_ancestry.orm import SelectProjector


def test_find_direct_parent(session, finder, first_tire_bolt_ids):
    query = select(Bolt).where(Bolt.id == first_tire_bolt_ids[0])

    tires = session.scalars(finder.find_parent(Bolt, Tire, query)).all()

    assert len(tires) == 1
    assert tires[0].brand == "First Tire Brand"


def test_find_distant_parent(session, finder, first_tire_bolt_ids):
    query = select(Bolt).where(Bolt.id == first_tire_bolt_ids[0])

    car = session.scalars(finder.find_parent(Bolt, Car, query)).first()

    assert car.make == "Kia"


def test_find_root_ancestor(session, finder, first_tire_bolt_ids):
    query = select(Bolt).where(Bolt.id == first_tire_bolt_ids[-1])

    garage = session.scalars(finder.find_parent(Bolt, Garage, query)).one()

    assert garage.name == "Main Street"


def test_find_parent_for_multiple(session, finder, first_tire_bolt_ids):
    query = select(Bolt).where(Bolt.id.in_(first_tire_bolt_ids))

    cars = session.scalars(finder.find_parent(Bolt, Car, query)).all()

    assert len(cars) == 3
    assert len({car.id for car in cars}) == 1
    assert cars[0].make == "Kia"


def test_every_bolt_reaches_its_own_tire(session, finder):
    tires = session.scalars(finder.find_parent(Bolt, Tire, select(Bolt).order_by(Bolt.id))).all()

    assert sorted(tire.brand for tire in tires) == ["First Tire Brand"] * 3 + ["Second Tire Brand"] * 3


def test_existing_criteria_are_kept(session, finder):
    second_tire = session.scalars(select(Tire).filter_by(brand="Second Tire Brand")).one()
    query = select(Bolt).where(Bolt.tire_id == second_tire.id)

    tires = session.scalars(finder.find_parent(Bolt, Tire, query)).all()

    assert {tire.brand for tire in tires} == {"Second Tire Brand"}


@pytest.mark.parametrize("model", [Garage, Car, Tire, Bolt])
def test_same_type_returns_query_unchanged(finder, model):
    query = select(model).where(model.id == 1)

    assert finder.find_parent(model, model, query) is query


def test_aliased_child_query(session, finder, first_tire_bolt_ids):
    bolt = aliased(Bolt)
    query = select(bolt).where(bolt.id == first_tire_bolt_ids[0])

    tires = session.scalars(finder.find_parent(Bolt, Tire, query)).all()

    assert [tire.brand for tire in tires] == ["First Tire Brand"]


def test_aliased_child_query_distant_parent(session, finder, first_tire_bolt_ids):
    bolt = aliased(Bolt, name="b")
    query = select(bolt).where(bolt.id.in_(first_tire_bolt_ids))

    cars = session.scalars(finder.find_parent(Bolt, Car, query)).all()

    assert len(cars) == 3
    assert {car.make for car in cars} == {"Kia"}


def test_query_over_another_type_is_rejected(finder):
    with pytest.raises(NoNavigationFound):
        finder.find_parent(Bolt, Tire, select(Car))


def test_find_parent_by_id(session, finder, first_tire_bolt_ids):
    car = session.scalars(finder.find_parent_by_id(Bolt, Car, first_tire_bolt_ids[1])).one()

    assert car.make == "Kia"


def test_find_parent_by_id_same_type(session, finder, first_tire_bolt_ids):
    bolt = session.scalars(finder.find_parent_by_id(Bolt, Bolt, first_tire_bolt_ids[0])).one()

    assert bolt.id == first_tire_bolt_ids[0]


def test_find_parent_by_id_rejects_wrong_id_type(finder):
    with pytest.raises(TypeError):
        finder.find_parent_by_id(Bolt, Car, "1")


def test_find_parent_by_id_needs_query_source(garage_graph):
    class BareProjector:
        def project(self, query, source, navigation, target):
            return query

    with pytest.raises(TypeError):
        ParentFinder(garage_graph, BareProjector()).find_parent_by_id("Bolt", "Car", 1)


def test_composite_child_key_is_rejected():
    composite_finder = ParentFinder.from_models(CompositeBase)

    with pytest.raises(CompositeKeyUnsupported) as excinfo:
        composite_finder.find_parent(Lug, Wheel, select(Lug))

    assert excinfo.value.key_fields == ("wheel_id", "position")


def test_composite_child_key_is_rejected_before_search(monkeypatch):
    composite_finder = ParentFinder.from_models(CompositeBase)
    monkeypatch.setattr(finder_module, "find_route", _forbidden_search)

    with pytest.raises(CompositeKeyUnsupported):
        composite_finder.find_parent(Lug, Lug, select(Lug))


def test_unmapped_parent_is_rejected_before_search(finder, monkeypatch):
    monkeypatch.setattr(finder_module, "find_route", _forbidden_search)

    with pytest.raises(TypeNotMapped) as excinfo:
        finder.find_parent(Bolt, Unmapped, select(Bolt))

    assert excinfo.value.identity is Unmapped
    assert excinfo.value.role == "parent type"


def test_unmapped_child_is_rejected(finder):
    with pytest.raises(TypeNotMapped) as excinfo:
        finder.find_parent(Unmapped, Car, select(Bolt))

    assert excinfo.value.role == "child type"


def test_descendant_lookup_has_no_route(finder):
    with pytest.raises(NoRouteFound):
        finder.find_parent(Garage, Bolt, select(Garage))


def test_errors_share_a_base_class(finder):
    with pytest.raises(SchemaAncestryError):
        finder.find_parent(Car, Tire, select(Car))


def test_route_without_composition(finder):
    route = finder.route(Bolt, Car)

    assert route.describe() == "Bolt -[tire]-> Tire -[car]-> Car"


def test_module_level_find_parent(session, finder, first_tire_bolt_ids):
    query = select(Bolt).where(Bolt.id == first_tire_bolt_ids[0])

    stmt = find_parent(finder.graph, SelectProjector(), Bolt, Tire, query)

    assert session.scalars(stmt).one().brand == "First Tire Brand"


def _forbidden_search(*args, **kwargs):
    raise AssertionError("route search must not run")
