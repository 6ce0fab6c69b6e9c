"""Import statements of the generated node file."""

from nodegen.parser.base import Operation
from nodegen.parser.casing import camel_case


class ImportsBuilder:
    def __init__(self, service_api_request: str, main_params: dict[str, list[Operation]]):
        self.service_api_request = service_api_request
        self.main_params = main_params

    def _has_get_all(self) -> bool:
        return any(op.operation_id == "getAll" for ops in self.main_params.values() for op in ops)

    def generic_functions_imports(self) -> str:
        names = [self.service_api_request]
        if self._has_get_all():
            names.append(self.service_api_request + "AllItems")
        lines = ["import {"]
        lines.extend(f"\t{name}," for name in names)
        lines.append("} from './GenericFunctions';")
        return "\n".join(lines)

    def descriptions_imports(self) -> str:
        lines = ["import {"]
        for resource_name in self.main_params:
            name = camel_case(resource_name)
            lines.append(f"\t{name}Fields,")
            lines.append(f"\t{name}Operations,")
        lines.append("} from './descriptions';")
        return "\n".join(lines)
