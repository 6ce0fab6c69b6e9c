"""Comment dividers separating resources and operations in generated code."""

from nodegen.parser.casing import camel_case

RESOURCE_WIDTH = 70
OPERATION_WIDTH = 40


class DividerBuilder:
    def _divider(self, title: str, char: str, width: int) -> str:
        rule = "// " + char * width
        return "\n".join([rule, "// " + title.center(width).rstrip(), rule])

    def resource_divider(self, resource_name: str) -> str:
        return self._divider(camel_case(resource_name), "*", RESOURCE_WIDTH)

    def operation_divider(self, resource_name: str, operation_id: str, operation_url: str | None = None) -> str:
        divider = self._divider(f"{camel_case(resource_name)}: {operation_id}", "-", OPERATION_WIDTH)
        if operation_url:
            divider += f"\n\n// {operation_url}"
        return divider

    def resource_description_divider(self, resource_name: str, operation_id: str) -> str:
        return self._divider(f"{camel_case(resource_name)}: {operation_id}", "-", OPERATION_WIDTH)
