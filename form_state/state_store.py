"""
State containers for form controllers.

Every mutation is submitted as either a new value or a function of the latest
applied value. Inside a batch, updates are queued and applied in submission
order when the outermost batch exits, so functional updates always see the
result of the updates queued before them.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
import logging

import streamlit as st

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]


class StateStore:
    """In-memory store of named state slices."""
    
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._state: Dict[str, Any] = dict(initial or {})
        self._queue: List[Tuple[str, Any]] = []
        self._batch_depth = 0
        self._listeners: List[Listener] = []
    
    # Storage hooks, overridden by backends
    def _has(self, name: str) -> bool:
        return name in self._state
    
    def _read(self, name: str) -> Any:
        return self._state[name]
    
    def _write(self, name: str, value: Any) -> None:
        self._state[name] = value
    
    def __contains__(self, name: str) -> bool:
        return self._has(name)
    
    def get(self, name: str, default: Any = None) -> Any:
        """Return the latest applied value of a slice."""
        if not self._has(name):
            return default
        return self._read(name)
    
    def init_slice(self, name: str, value: Any) -> bool:
        """
        Create a slice if it does not exist yet.
        
        Returns:
            True if the slice was created, False if it already existed
        """
        if self._has(name):
            return False
        self._write(name, value)
        return True
    
    def set(self, name: str, update: Any) -> None:
        """
        Submit an update for a slice.
        
        Args:
            name: Slice name
            update: New value, or a callable receiving the latest applied
                value and returning the next one
        """
        if self._batch_depth:
            self._queue.append((name, update))
            return
        self._apply(name, update)
    
    @property
    def is_batching(self) -> bool:
        return self._batch_depth > 0
    
    @property
    def pending_updates(self) -> int:
        return len(self._queue)
    
    @contextmanager
    def batch(self) -> Iterator['StateStore']:
        """
        Defer updates until the outermost batch exits.
        
        Updates queued inside a batch that exits with an exception are dropped.
        """
        queued_before = len(self._queue)
        self._batch_depth += 1
        try:
            yield self
        except Exception:
            dropped = len(self._queue) - queued_before
            del self._queue[queued_before:]
            if dropped:
                logger.warning(f"Discarded {dropped} queued state update(s) after error in batch")
            raise
        finally:
            self._batch_depth -= 1
        
        if self._batch_depth == 0:
            self.flush()
    
    def flush(self) -> None:
        """
        Apply queued updates in submission order.
        
        If an update raises, the updates queued after it are dropped.
        """
        queue, self._queue = self._queue, []
        for index, (name, update) in enumerate(queue):
            try:
                self._apply(name, update)
            except Exception:
                dropped = len(queue) - index - 1
                if dropped:
                    logger.warning(f"Discarded {dropped} queued state update(s) after failed update of '{name}'")
                raise
    
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with (name, value) after each applied update.
        
        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def _apply(self, name: str, update: Any) -> None:
        if callable(update):
            value = update(self.get(name))
        else:
            value = update
        self._write(name, value)
        
        for listener in list(self._listeners):
            listener(name, value)


class SessionStateStore(StateStore):
    """
    Store backed by Streamlit session state.
    
    Slices live in ``st.session_state`` under ``{prefix}{name}`` so form state
    survives script reruns.
    """
    
    def __init__(self, prefix: str = 'form_'):
        super().__init__()
        self.prefix = prefix
    
    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"
    
    def _has(self, name: str) -> bool:
        return self._key(name) in st.session_state
    
    def _read(self, name: str) -> Any:
        return st.session_state[self._key(name)]
    
    def _write(self, name: str, value: Any) -> None:
        st.session_state[self._key(name)] = value
    
    def clear(self, names: List[str]) -> None:
        """Remove slices from session state."""
        for name in names:
            key = self._key(name)
            if key in st.session_state:
                del st.session_state[key]
        logger.info(f"Cleared form state under prefix '{self.prefix}'")
