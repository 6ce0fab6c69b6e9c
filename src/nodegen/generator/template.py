"""Template builder: assembles node source fragments from nodegen params."""

from nodegen.generator.api_call import ApiCallBuilder
from nodegen.generator.branch import BranchBuilder
from nodegen.generator.divider import DividerBuilder
from nodegen.generator.imports import ImportsBuilder
from nodegen.generator.resource import ResourceBuilder
from nodegen.parser.base import NodegenParams, Operation
from nodegen.parser.casing import camel_case, pascal_case


def _indent(text: str, tabs: int) -> str:
    prefix = "\t" * tabs
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


class TemplateBuilder:
    """Facade over the fragment builders, one instance per generated node."""

    def __init__(self, params: NodegenParams):
        self.params = params
        self.main_params = params.main_params
        self.resource_names = list(params.main_params)
        self.service_api_request = camel_case(params.meta_params.service_name) + "ApiRequest"

        self.api_call_builder = ApiCallBuilder(self.service_api_request)
        self.imports_builder = ImportsBuilder(self.service_api_request, self.main_params)
        self.divider_builder = DividerBuilder()
        self.branch_builder = BranchBuilder(self.main_params)
        self.resource_builder = ResourceBuilder()

    # -- delegates ------------------------------------------------------------

    def api_call(self, operation: Operation) -> str:
        return self.api_call_builder.run(operation)

    def generic_functions_imports(self) -> str:
        return self.imports_builder.generic_functions_imports()

    def resource_divider(self, resource_name: str) -> str:
        return self.divider_builder.resource_divider(resource_name)

    def operation_divider(self, resource_name: str, operation_id: str, operation_url: str | None = None) -> str:
        return self.divider_builder.operation_divider(resource_name, operation_id, operation_url)

    def resource_branch(self, resource_name: str) -> str:
        return self.branch_builder.resource_branch(resource_name)

    def operation_branch(self, resource_name: str, operation: Operation) -> str:
        return self.branch_builder.operation_branch(resource_name, operation)

    def resource_error(self, resource_name: str, enabled: bool = False) -> str | None:
        return self.branch_builder.resource_error(resource_name, enabled)

    def operation_error(self, resource_name: str, operation: Operation, enabled: bool = False) -> str | None:
        return self.branch_builder.operation_error(resource_name, operation, enabled)

    # -- assembly -------------------------------------------------------------

    def render_execute(self, errors: bool = True) -> str:
        """The resource/operation dispatch placed inside the node's item loop."""
        lines = []
        for resource_name in self.resource_names:
            lines.append(self.resource_divider(resource_name))
            lines.append("")
            lines.append(self.resource_branch(resource_name))
            for operation in self.main_params[resource_name]:
                lines.append("")
                lines.append(_indent(self.operation_divider(resource_name, operation.operation_id, operation.operation_url), 1))
                lines.append("")
                lines.append(self.operation_branch(resource_name, operation))
                lines.append(_indent(self.api_call(operation), 2))
                closing = self.operation_error(resource_name, operation, enabled=errors)
                if closing:
                    lines.append(closing)
            lines.append("")
            closing = self.resource_error(resource_name, enabled=errors)
            if closing:
                lines.append(closing)
        return "\n".join(lines) + "\n"

    def render_imports(self) -> str:
        return "\n".join(
            [
                "import { IExecuteFunctions } from 'n8n-core';",
                "import { IDataObject, INodeExecutionData, INodeType, INodeTypeDescription } from 'n8n-workflow';",
                "",
                self.generic_functions_imports(),
                "",
                self.imports_builder.descriptions_imports(),
            ]
        ) + "\n"

    def render_descriptions_index(self) -> str:
        lines = [f"export * from './{pascal_case(name)}Description';" for name in self.resource_names]
        return "\n".join(lines) + "\n"

    def render(self) -> dict[str, str]:
        """Return {filepath: content} for every generated fragment."""
        node_name = pascal_case(self.params.meta_params.service_name)
        files = {
            f"{node_name}.imports.ts": self.render_imports(),
            f"{node_name}.execute.ts": self.render_execute(),
            "descriptions/index.ts": self.render_descriptions_index(),
        }
        for resource_name, operations in self.main_params.items():
            files[f"descriptions/{pascal_case(resource_name)}Description.ts"] = self.resource_builder.description(
                resource_name, operations
            )
        return files
