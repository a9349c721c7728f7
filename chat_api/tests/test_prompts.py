from django.test import SimpleTestCase

from agent.tools.registry import ToolRegistry
from chat_api.prompts import OUTPUT_RULES, build_data_system_prompt, build_dcm_system_prompt
from datasources.registry import DataSourceRegistry, build_datasource_registry
from datasources.tools import build_data_toolset
from dcm.tools import build_dcm_toolset


class DataPromptTests(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.datasources = build_datasource_registry()
        self.tools = ToolRegistry()
        self.tools.register_tools(build_data_toolset(self.datasources))
        self.prompt = build_data_system_prompt(self.datasources, self.tools)

    def test_sections_in_order(self):
        headings = [line for line in self.prompt.splitlines() if line.startswith("## ")]
        self.assertEqual(headings, ["## Role", "## Data sources", "## Tools", "## Workflow", "## Output"])

    def test_lists_every_source_and_aggregation(self):
        for source in self.datasources.all():
            self.assertIn(f"**{source.name}**", self.prompt)
            for aggregation in source.chart_aggregations:
                self.assertIn(f"{source.name}:{aggregation.key}", self.prompt)

    def test_tools_listed_in_registration_order(self):
        positions = [self.prompt.index(f"`{name}(") for name in self.tools.names()]
        self.assertEqual(positions, sorted(positions))

    def test_empty_registry(self):
        prompt = build_data_system_prompt(DataSourceRegistry(), ToolRegistry())
        self.assertIn("No data sources available.", prompt)
        self.assertIn("No tools available.", prompt)


class DcmPromptTests(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.tools = ToolRegistry()
        self.tools.register_tools(build_dcm_toolset())
        self.prompt = build_dcm_system_prompt(self.tools)

    def test_sections(self):
        headings = [line for line in self.prompt.splitlines() if line.startswith("## ")]
        self.assertEqual(headings, ["## Role", "## Tools", "## Workflow", "## Identifiers", "## Output"])
        self.assertTrue(self.prompt.endswith(OUTPUT_RULES))

    def test_every_tool_is_described(self):
        for name in self.tools.names():
            self.assertIn(f"`{name}(", self.prompt)

    def test_resolve_comes_first_in_workflow(self):
        workflow = self.prompt.split("## Workflow", 1)[1]
        self.assertLess(workflow.index("resolve_entity"), workflow.index("get_issuer_deals"))
