import pytest

from railnet_sim.simulator.trains import Outcome, TrainCategory, TrainRegistry, TrainRequest

VALID = dict(name="Express 101", origin="bangalore", destination="davanagere",
             weight_tonnes="500", speed_kmh="80", category="express")


def test_valid_request_is_accepted():
    registry = TrainRegistry()
    admission = registry.add_train(TrainRequest(**VALID))
    assert admission.outcome is Outcome.ACCEPTED
    train = admission.train
    assert train.weight_tonnes == 500 and train.speed_kmh == 80
    assert train.category is TrainCategory.EXPRESS
    assert train.progress == 0 and train.position == (0.0, 0.0) and train.active
    assert registry.snapshot() == (train,)


@pytest.mark.parametrize("field", ["name", "origin", "destination", "weight_tonnes", "speed_kmh"])
@pytest.mark.parametrize("empty", [None, "", "  "])
def test_missing_field_is_rejected(field, empty):
    registry = TrainRegistry()
    admission = registry.add_train(TrainRequest(**dict(VALID, **{field: empty})))
    assert admission.outcome is Outcome.REJECTED
    assert admission.train is None
    assert len(registry) == 0


@pytest.mark.parametrize("weight, speed", [("0", "80"), ("500", "-5"), ("heavy", "80"), (500, float("nan"))])
def test_invalid_numbers_are_rejected(weight, speed):
    registry = TrainRegistry()
    admission = registry.add_train(TrainRequest(**dict(VALID, weight_tonnes=weight, speed_kmh=speed)))
    assert admission.outcome is Outcome.REJECTED


def test_string_numbers_are_truncated():
    train = TrainRegistry().add_train(TrainRequest(**dict(VALID, weight_tonnes="650.9", speed_kmh="72.5"))).train
    assert (train.weight_tonnes, train.speed_kmh) == (650, 72)


def test_unknown_category_rejected_and_default_is_passenger():
    registry = TrainRegistry()
    assert registry.add_train(TrainRequest(**dict(VALID, category="maglev"))).outcome is Outcome.REJECTED
    train = registry.add_train(TrainRequest(**dict(VALID, category=None))).train
    assert train.category is TrainCategory.PASSENGER


def test_same_origin_and_destination_is_admitted():
    admission = TrainRegistry().add_train(TrainRequest(**dict(VALID, destination="bangalore")))
    assert admission.accepted


def test_ids_are_unique_and_order_is_kept():
    registry = TrainRegistry()
    names = [f"T{i}" for i in range(5)]
    for name in names:
        registry.add_train(TrainRequest(**dict(VALID, name=name)))
    assert [t.name for t in registry] == names
    assert len({t.id for t in registry}) == 5


def test_from_mapping_accepts_form_keys():
    request = TrainRequest.from_mapping({"name": "G", "from": "a", "to": "b", "weight": 2000, "speed": 50, "type": "freight"})
    assert (request.origin, request.destination, request.weight_tonnes, request.speed_kmh, request.category) == ("a", "b", 2000, 50, "freight")


def test_remove_and_pause():
    registry = TrainRegistry()
    first = registry.add_train(TrainRequest(**VALID)).train
    second = registry.add_train(TrainRequest(**dict(VALID, name="Other"))).train
    assert registry.set_active(first.id, False)
    assert registry.get(first.id).active is False
    assert not registry.set_active("missing", True)
    assert registry.remove_train(second.id)
    assert not registry.remove_train(second.id)
    assert [t.id for t in registry] == [first.id]


def test_reversed_swaps_leg():
    train = TrainRegistry().add_train(TrainRequest(**VALID)).train
    back = train.reversed()
    assert (back.origin, back.destination, back.progress) == (train.destination, train.origin, 0.0)
    assert back.as_dict()["category"] == "express"


def test_reseeded_registry_never_reuses_ids():
    registry = TrainRegistry()
    for name in ("A", "B", "C"):
        registry.add_train(TrainRequest(**dict(VALID, name=name)))
    assert registry.remove_train("train-2")
    reseeded = TrainRegistry(registry.snapshot())
    new = reseeded.add_train(TrainRequest(**dict(VALID, name="D"))).train
    ids = [t.id for t in reseeded]
    assert new.id == "train-4"
    assert len(set(ids)) == len(ids) == 3


def test_duplicate_ids_rejected_on_seed():
    train = TrainRegistry().add_train(TrainRequest(**VALID)).train
    with pytest.raises(ValueError):
        TrainRegistry([train, train])
