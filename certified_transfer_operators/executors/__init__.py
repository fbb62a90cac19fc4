from .multi_thread_executor import MultithreadExecutor
from .single_thread_executor import SinglethreadExecutor


__all__ = [
    "MultithreadExecutor",
    "SinglethreadExecutor",
]
