"""Resource and operation branches of the node's execute method."""

from nodegen.parser.base import Operation
from nodegen.parser.casing import camel_case

UNKNOWN_RESOURCE = "throw new Error(`Unknown resource: ${resource}`);"
UNKNOWN_OPERATION = "throw new Error(`Unknown operation: ${operation}`);"


class BranchBuilder:
    """Builds the ``if / else if`` chains that dispatch on resource and operation."""

    def __init__(self, main_params: dict[str, list[Operation]]):
        self.main_params = main_params
        self.resource_names = list(main_params)

    def _is_first_operation(self, resource_name: str, operation: Operation) -> bool:
        return self.main_params[resource_name].index(operation) == 0

    def _is_last_operation(self, resource_name: str, operation: Operation) -> bool:
        return self.main_params[resource_name].index(operation) == len(self.main_params[resource_name]) - 1

    def resource_branch(self, resource_name: str) -> str:
        branch = f"if (resource === '{camel_case(resource_name)}') {{"
        if self.resource_names.index(resource_name) == 0:
            return branch
        return "} else " + branch

    def operation_branch(self, resource_name: str, operation: Operation) -> str:
        branch = f"if (operation === '{camel_case(operation.operation_id)}') {{"
        if self._is_first_operation(resource_name, operation):
            return "\t" + branch
        return "\t} else " + branch

    def operation_error(self, resource_name: str, operation: Operation, enabled: bool = False) -> str | None:
        """Close the operation chain after the last operation of a resource."""
        if not self._is_last_operation(resource_name, operation):
            return None
        if not enabled:
            return "\t}"
        return f"\t}} else {{\n\t\t{UNKNOWN_OPERATION}\n\t}}"

    def resource_error(self, resource_name: str, enabled: bool = False) -> str | None:
        """Close the resource chain after the last resource."""
        if self.resource_names.index(resource_name) != len(self.resource_names) - 1:
            return None
        if not enabled:
            return "}"
        return f"}} else {{\n\t{UNKNOWN_RESOURCE}\n}}"
