import unittest

from src.keybridge.domain._errors import SchemaError
from src.keybridge.domain._operator_def import OperatorDef
from src.keybridge.infrastructure.operators import (
    OpSchema,
    get_schema,
    operator_schema,
    registered_schemas,
)


class TestOpSchema(unittest.TestCase):
    def test_exact_arity(self):
        s = OpSchema("Foo").num_inputs(2).num_outputs(1)
        s.verify(OperatorDef("Foo", ["a", "b"], ["c"]))
        with self.assertRaises(SchemaError) as cm:
            s.verify(OperatorDef("Foo", ["a"], ["c"]))
        self.assertIn("expects 2 inputs, got 1", str(cm.exception))
        with self.assertRaises(SchemaError):
            s.verify(OperatorDef("Foo", ["a", "b"], []))

    def test_ranged_arity(self):
        s = OpSchema("Bar").num_inputs(1).num_outputs(2, 3)
        s.verify(OperatorDef("Bar", ["x"], ["a", "b"]))
        s.verify(OperatorDef("Bar", ["x"], ["a", "b", "c"]))
        with self.assertRaises(SchemaError) as cm:
            s.verify(OperatorDef("Bar", ["x"], ["a", "b", "c", "d"]))
        self.assertIn("2 to 3 outputs", str(cm.exception))

    def test_builder_records_docs(self):
        s = (
            OpSchema("Baz")
            .set_doc("does baz")
            .input(0, "X", "input")
            .output(0, "Y", "output")
            .arg("alpha", "scale")
        )
        self.assertEqual(s.doc, "does baz")
        self.assertEqual(s.input_desc[0], ("X", "input"))
        self.assertEqual(s.output_desc[0], ("Y", "output"))
        self.assertEqual(s.arg_desc, [("alpha", "scale")])


class TestSchemaRegistry(unittest.TestCase):
    def test_conv_transpose_schemas_registered(self):
        names = registered_schemas()
        self.assertIn("ConvTranspose", names)
        self.assertIn("ConvTransposeGradient", names)

        fwd = get_schema("ConvTranspose")
        self.assertEqual((fwd.min_input, fwd.max_input), (3, 3))
        self.assertEqual((fwd.min_output, fwd.max_output), (1, 1))
        self.assertEqual([fwd.input_desc[i][0] for i in range(3)], ["X", "filter", "bias"])
        self.assertEqual(fwd.output_desc[0][0], "Y")
        self.assertTrue(fwd.doc.strip())

        grad = get_schema("ConvTransposeGradient")
        self.assertEqual((grad.min_output, grad.max_output), (2, 3))

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):
            operator_schema("ConvTranspose")

    def test_unknown_schema(self):
        self.assertIsNone(get_schema("NoSuchOperator"))


if __name__ == "__main__":
    unittest.main()
