from django.test import SimpleTestCase, override_settings

from agent.pipelines.registry import PipelineRegistry
from chat_api.bootstrap import DATA_ASSISTANT, DCM_ASSISTANT, bootstrap


class BootstrapTests(SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.pipelines = PipelineRegistry()

    def test_registers_both_assistants(self):
        with self.assertLogs("chat_api.bootstrap", level="INFO"):
            composition = bootstrap(self.pipelines)
        self.assertIs(composition.pipelines, self.pipelines)
        self.assertEqual(sorted(self.pipelines.pipeline_ids()), [DATA_ASSISTANT, DCM_ASSISTANT])

        data = self.pipelines.get_pipeline(DATA_ASSISTANT)
        dcm = self.pipelines.get_pipeline(DCM_ASSISTANT)
        self.assertIs(data.tool_registry, composition.data_tools)
        self.assertIs(dcm.tool_registry, composition.dcm_tools)
        self.assertIn("employees:byDepartment", data.system_prompt)
        self.assertIn("resolve_entity", dcm.system_prompt)

    def test_default_step_ceilings(self):
        bootstrap(self.pipelines)
        self.assertEqual(self.pipelines.get_pipeline(DATA_ASSISTANT).max_steps, 5)
        self.assertEqual(self.pipelines.get_pipeline(DCM_ASSISTANT).max_steps, 10)

    @override_settings(DATA_ASSISTANT_MAX_STEPS=3, DCM_ASSISTANT_MAX_STEPS=12)
    def test_step_ceilings_from_settings(self):
        bootstrap(self.pipelines)
        self.assertEqual(self.pipelines.get_pipeline(DATA_ASSISTANT).max_steps, 3)
        self.assertEqual(self.pipelines.get_pipeline(DCM_ASSISTANT).max_steps, 12)

    def test_rerun_replaces_pipelines(self):
        first = bootstrap(self.pipelines)
        second = bootstrap(self.pipelines)
        self.assertEqual(len(self.pipelines.pipeline_ids()), 2)
        self.assertIs(self.pipelines.get_pipeline(DCM_ASSISTANT).tool_registry, second.dcm_tools)
        self.assertIsNot(second.dcm_tools, first.dcm_tools)
