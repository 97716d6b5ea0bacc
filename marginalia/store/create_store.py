"""Composable state store: namespaced modules behind one dispatch entry point.

A module declares its initial state, a mapping from action type to reducer,
its action creators and its selectors. `create_store` combines modules into a
single `Store` whose state tree is ``{namespace: module_state}``.

Reducers are pure, synchronous, and return a *patch*: a mapping merged
shallowly over the module's previous state. Dispatch computes every module's
next state before swapping the tree in one assignment, so no observer (and no
coroutine resumed later on the event loop) ever sees a half-applied action.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

State = dict[str, Any]
Reducer = Callable[[State, "Action"], Mapping[str, Any]]
Thunk = Callable[[Callable[..., Any], Callable[[], State]], Any]


@dataclass(frozen=True)
class Action:
    """A dispatchable action: a type tag plus its payload."""

    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoreModule:
    namespace: str
    initial_state: Callable[[], State]
    reducers: Mapping[str, Reducer]
    action_creators: Mapping[str, Callable[..., Action | Thunk]]
    selectors: Mapping[str, Callable[..., Any]]
    root_selectors: Mapping[str, Callable[..., Any]]


def create_store_module(
    initial_state: State | Callable[[], State],
    *,
    namespace: str,
    reducers: Mapping[str, Reducer],
    action_creators: Mapping[str, Callable[..., Action | Thunk]],
    selectors: Mapping[str, Callable[..., Any]],
    root_selectors: Mapping[str, Callable[..., Any]] | None = None,
) -> StoreModule:
    """Declare a store module.

    `initial_state` may be a value or a zero-argument factory. Values are
    shallow-copied per store so two stores never share a module state dict.
    """
    if callable(initial_state):
        factory = initial_state
    else:
        snapshot = dict(initial_state)

        def factory() -> State:
            return dict(snapshot)

    return StoreModule(
        namespace=namespace,
        initial_state=factory,
        reducers=dict(reducers),
        action_creators=dict(action_creators),
        selectors=dict(selectors),
        root_selectors=dict(root_selectors or {}),
    )


def make_action(
    reducers: Mapping[str, Reducer], type: str, payload: Mapping[str, Any] | None = None
) -> Action:
    """Create an action of `type`, which must be one of `reducers`' keys."""
    if type not in reducers:
        raise UnknownActionError(f"Unknown action type: {type}")
    return Action(type=type, payload=dict(payload or {}))


def merge_patch(previous: State, patch: Mapping[str, Any]) -> State:
    """Shallow-merge `patch` over `previous`. Keys absent from the patch keep their values."""
    if patch is previous:
        return previous
    return {**previous, **patch}


class Store:
    """Holds the state tree of a set of modules.

    Every action creator is bound on the store as a method that dispatches the
    created action; every selector is bound as a method reading its module's
    namespace, and every root selector as a method reading the whole tree.
    """

    def __init__(self, modules: list[StoreModule]) -> None:
        self._modules = list(modules)
        self._state: State = {m.namespace: m.initial_state() for m in self._modules}
        self._listeners: list[Callable[[], None]] = []
        self._bind_modules()

    def get_state(self) -> State:
        return self._state

    def dispatch(self, action: Action | Thunk) -> Any:
        """Apply `action` to every module that handles its type.

        A callable is treated as a thunk and called with
        ``(dispatch, get_state)``; its return value is returned.
        """
        if callable(action):
            return action(self.dispatch, self.get_state)

        next_state = dict(self._state)
        changed = False
        for module in self._modules:
            reducer = module.reducers.get(action.type)
            if reducer is None:
                continue
            previous = self._state[module.namespace]
            updated = merge_patch(previous, reducer(previous, action))
            if updated is not previous:
                next_state[module.namespace] = updated
                changed = True

        logger.debug("dispatch %s (changed=%s)", action.type, changed)
        if not changed:
            return None

        self._state = next_state
        for listener in list(self._listeners):
            listener()
        return None

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call `listener` after each state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _bind_modules(self) -> None:
        bound: dict[str, str] = {}

        def bind(name: str, namespace: str, method: Callable[..., Any]) -> None:
            if name in bound or hasattr(type(self), name):
                owner = bound.get(name, "Store")
                raise SelectorConflictError(
                    f"'{name}' from module '{namespace}' conflicts with '{owner}'"
                )
            bound[name] = namespace
            setattr(self, name, method)

        for module in self._modules:
            for name, creator in module.action_creators.items():
                bind(name, module.namespace, self._bind_action_creator(creator))
            for name, selector in module.selectors.items():
                bind(name, module.namespace, self._bind_selector(module.namespace, selector))
            for name, selector in module.root_selectors.items():
                bind(name, module.namespace, self._bind_root_selector(selector))

    def _bind_action_creator(self, creator: Callable[..., Action | Thunk]) -> Callable[..., Any]:
        def dispatch_created(*args: Any, **kwargs: Any) -> Any:
            return self.dispatch(creator(*args, **kwargs))

        return dispatch_created

    def _bind_selector(self, namespace: str, selector: Callable[..., Any]) -> Callable[..., Any]:
        def select(*args: Any, **kwargs: Any) -> Any:
            return selector(self._state[namespace], *args, **kwargs)

        return select

    def _bind_root_selector(self, selector: Callable[..., Any]) -> Callable[..., Any]:
        def select(*args: Any, **kwargs: Any) -> Any:
            return selector(self._state, *args, **kwargs)

        return select


def create_store(modules: list[StoreModule]) -> Store:
    return Store(modules)


class UnknownActionError(ValueError):
    pass


class SelectorConflictError(ValueError):
    pass
