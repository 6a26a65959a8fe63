import pytest

from winter.component import Component


class Repo(Component):
    pass


class Service(Component):
    repo: Repo

    def __init__(self):
        self.repo = None


class Holder(Component):
    repo: Repo

    def __init__(self):
        self.own = Repo()
        self.repo = self.own


class Counter(Component):
    def __init__(self):
        self.value = 7


class NotAComponent:
    pass


def test_dependencies_are_wired_to_shared_instance():
    Component.initialize_components()
    service = Component.get_component(Service)
    assert service.repo is Component.get_component(Repo)


def test_initialize_is_idempotent():
    first = Component.initialize_components()
    second = Component.initialize_components()
    assert len(first) == len(second)
    assert all(a is b for a, b in zip(first, second))


def test_every_registered_class_has_an_instance():
    instances = Component.initialize_components()
    types = {type(instance) for instance in instances}
    assert {Repo, Service, Holder, Counter} <= types


def test_preset_dependency_is_kept():
    Component.initialize_components()
    holder = Component.get_component(Holder)
    assert holder.repo is holder.own
    assert holder.repo is not Component.get_component(Repo)


def test_get_component_unknown_type_raises():
    Component.initialize_components()
    with pytest.raises(LookupError):
        Component.get_component(NotAComponent)


def test_get_component_returns_the_created_instance():
    Component.initialize_components()
    counter = Component.get_component(Counter)
    assert counter.value == 7
    counter.value = 8
    assert Component.get_component(Counter).value == 8