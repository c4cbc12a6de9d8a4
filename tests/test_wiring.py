import pytest

from i18n_codemod.structures import PrintOptions
from i18n_codemod.wiring import (
    ExportShape,
    WiringAction,
    apply_wiring,
    callee_head,
    classify_export,
    find_default_export,
    find_functions,
    plan_wiring,
)

PRINT = PrintOptions()


class TestExportShape:
    def test_identifier_export(self, document):
        doc = document("const A = 1;\nexport default A;\n")
        assert classify_export(find_default_export(doc)) is ExportShape.IDENTIFIER

    def test_call_export(self, document):
        doc = document("export default connect(mapState)(Widget);\n")
        assert classify_export(find_default_export(doc)) is ExportShape.CALL

    def test_declaration_export_is_other(self, document):
        doc = document("export default function Page() { return null; }\n")
        assert classify_export(find_default_export(doc)) is ExportShape.OTHER

    def test_missing_export_is_other(self, document):
        doc = document("export const A = 1;\n")
        assert plan_wiring(doc).action is WiringAction.NONE


class TestFunctionResolution:
    def test_function_declaration(self, document):
        doc = document("function Foo() {}\nexport default Foo;\n")
        [found] = find_functions(doc, "Foo")
        assert found.type == "function_declaration"

    def test_arrow_assigned_to_const(self, document):
        doc = document("const Foo = () => null;\nconst Bar = () => null;\n")
        [found] = find_functions(doc, "Foo")
        assert found.type == "arrow_function"

    def test_function_nested_in_another_call_is_not_resolved(self, document):
        doc = document("const Foo = memo(() => null);\n")
        assert find_functions(doc, "Foo") == []

    def test_class_is_not_a_function(self, document):
        doc = document("class Foo extends React.Component {}\n")
        assert find_functions(doc, "Foo") == []


class TestPlanning:
    def test_resolvable_identifier_prefers_hook(self, document):
        doc = document("function Foo() { return null; }\nexport default Foo;\n")
        plan = plan_wiring(doc)
        assert plan.action is WiringAction.HOOK
        assert len(plan.functions) == 1
        assert doc.edits == []

    def test_unresolvable_identifier_wraps(self, document):
        doc = document("import Foo from './Foo';\nexport default Foo;\n")
        plan = plan_wiring(doc)
        assert plan.shape is ExportShape.IDENTIFIER
        assert plan.action is WiringAction.WRAP

    def test_call_with_resolvable_argument_uses_hook(self, document):
        doc = document("const Card = () => null;\nexport default memo(Card);\n")
        plan = plan_wiring(doc)
        assert plan.shape is ExportShape.CALL
        assert plan.action is WiringAction.HOOK

    def test_call_without_resolvable_argument_wraps(self, document):
        doc = document("export default connect(mapState)(Widget);\n")
        assert plan_wiring(doc).action is WiringAction.WRAP

    def test_existing_wrapper_is_already_wired(self, document):
        doc = document("export default withTranslation()(Widget);\n")
        plan = plan_wiring(doc)
        assert plan.action is WiringAction.NONE
        assert plan.already_wired is True

    def test_legacy_wrapper_name_is_recognised(self, document):
        doc = document("export default withTranslate(Widget);\n")
        assert plan_wiring(doc).already_wired is True

    def test_callee_head_walks_curried_calls(self, document):
        doc = document("export default connect(a)(b)(Widget);\n")
        assert callee_head(doc, find_default_export(doc)) == "connect"


class TestApply:
    def test_hook_is_first_statement_of_block(self, document):
        doc = document(
            """
            function Comp() {
              return null;
            }
            export default Comp;
            """
        )
        state = apply_wiring(doc, plan_wiring(doc), PRINT)
        assert state.hook_in_use and not state.wrapper_in_use
        assert doc.render() == (
            "function Comp() {\n"
            "  const { t } = useTranslation();\n"
            "  return null;\n"
            "}\n"
            "export default Comp;\n"
        )

    def test_single_line_block(self, document):
        doc = document("function A() { return 1; }\nexport default A;\n")
        apply_wiring(doc, plan_wiring(doc), PRINT)
        assert doc.render().startswith(
            "function A() { const { t } = useTranslation(); return 1; }"
        )

    def test_empty_block(self, document):
        doc = document("function A() {}\nexport default A;\n")
        apply_wiring(doc, plan_wiring(doc), PRINT)
        assert doc.render().startswith(
            "function A() {\n  const { t } = useTranslation();\n}"
        )

    def test_expression_body_becomes_block(self, document):
        doc = document("const Card = () => null;\nexport default memo(Card);\n")
        apply_wiring(doc, plan_wiring(doc), PRINT)
        assert doc.render() == (
            "const Card = () => {\n"
            "  const { t } = useTranslation();\n"
            "  return null;\n"
            "};\n"
            "export default memo(Card);\n"
        )

    def test_existing_hook_binding_is_reused(self, document):
        doc = document(
            """
            function Page() {
              const { t } = useTranslation();
              return null;
            }
            export default Page;
            """
        )
        state = apply_wiring(doc, plan_wiring(doc), PRINT)
        assert state.hook_in_use is True
        assert doc.edits == []

    @pytest.mark.parametrize(
        "binding",
        ["const { t, i18n } = useTranslation();", "const { t: t } = useTranslation();", "const [t] = useTranslation();"],
    )
    def test_other_binding_forms_are_reused(self, document, binding):
        doc = document(f"function Page() {{\n  {binding}\n  return null;\n}}\nexport default Page;\n")
        apply_wiring(doc, plan_wiring(doc), PRINT)
        assert doc.edits == []

    def test_hook_without_t_binding_still_gets_injected(self, document):
        doc = document(
            """
            function Page() { const { i18n } = useTranslation(); return <p>Hi</p>; }
            export default Page;
            """
        )
        state = apply_wiring(doc, plan_wiring(doc), PRINT)
        assert state.hook_in_use is True
        assert doc.render().startswith(
            "function Page() { const { t } = useTranslation(); const { i18n } = useTranslation();"
        )

    def test_wrapper_double_invocation(self, document):
        doc = document("export default connect(mapState)(Widget);\n")
        state = apply_wiring(doc, plan_wiring(doc), PRINT)
        assert state.wrapper_in_use and not state.hook_in_use
        assert doc.render() == (
            "export default withTranslation()(connect(mapState)(Widget));\n"
        )

    def test_other_shape_is_untouched(self, document):
        doc = document("export default class Page {}\n")
        state = apply_wiring(doc, plan_wiring(doc), PRINT)
        assert state.import_requirement is None
        assert doc.edits == []
