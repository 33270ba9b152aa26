from typing import Callable, Type, TypeVar

from esper import World

T = TypeVar("T")


def get_or_create_singleton(world: World, component_type: Type[T], factory: Callable[[], T]) -> T:
    """Return the shared component of ``component_type``, creating it if absent."""
    for _, component in world.get_component(component_type):
        return component
    component = factory()
    world.create_entity(component)
    return component
