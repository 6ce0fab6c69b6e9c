"""Package manifest of the generated node."""

import json

from nodegen.generator.helpers import credentials_name
from nodegen.parser.base import MetaParams
from nodegen.parser.casing import kebab_case, pascal_case

PACKAGE_VERSION = "0.1.0"


def generate(meta: MetaParams) -> dict:
    """Build the package.json contents for a node described by ``meta``."""
    node_name = pascal_case(meta.service_name)
    credentials = []
    if meta.auth_type != "None":
        credentials_file = pascal_case(credentials_name(meta.service_name, meta.auth_type))
        credentials.append(f"dist/credentials/{credentials_file}.credentials.js")

    return {
        "name": f"n8n-nodes-{kebab_case(meta.service_name)}",
        "version": PACKAGE_VERSION,
        "description": f"n8n node for the {meta.service_name} API",
        "keywords": ["n8n-community-node-package", kebab_case(meta.service_name)],
        "license": "MIT",
        "main": "index.js",
        "scripts": {
            "build": "tsc && gulp build:icons",
            "dev": "tsc --watch",
            "lint": "eslint nodes credentials package.json",
        },
        "files": ["dist"],
        "n8n": {
            "n8nNodesApiVersion": 1,
            "credentials": credentials,
            "nodes": [f"dist/nodes/{node_name}/{node_name}.node.js"],
        },
        "devDependencies": {
            "gulp": "^4.0.2",
            "n8n-core": "*",
            "n8n-workflow": "*",
            "typescript": "~4.8.4",
        },
    }


def render(meta: MetaParams) -> str:
    return json.dumps(generate(meta), indent=2) + "\n"
