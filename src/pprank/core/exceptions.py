"""Exceptions raised by the PageRank estimators."""


class PageRankError(Exception):
    """Base exception for the pprank package."""

    pass


class InvalidArgument(PageRankError, ValueError):
    """A parameter is outside its documented range."""

    def __init__(self, name: str, value: object, expected: str):
        self.name = name
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid {name}={value!r}: expected {expected}")


class NodeNotFound(PageRankError, KeyError):
    """A node id is outside the graph's [0, n) range."""

    def __init__(self, node_id: object, size: int):
        self.node_id = node_id
        self.size = size
        super().__init__(f"Node not found: id={node_id!r}, graph size={size}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class EmptyGraph(PageRankError):
    """The graph has no nodes."""

    def __init__(self, operation: str = ""):
        self.operation = operation
        msg = "Graph has no nodes"
        if operation:
            msg += f" (operation: {operation})"
        super().__init__(msg)
