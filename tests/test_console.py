import unittest

from magetools.lib.console import ask_confirmation, parse_bool_option


class ConsoleTest(unittest.TestCase):
    def test_parse_bool_option(self):
        self.assertIsNone(parse_bool_option(None))
        for value in ("1", "y", "Yes", "TRUE", "on"):
            self.assertTrue(parse_bool_option(value), value)
        for value in ("0", "n", "no", "false", "maybe"):
            self.assertFalse(parse_bool_option(value), value)

    def test_parse_bool_option_empty_is_unset(self):
        self.assertIsNone(parse_bool_option(""))
        self.assertIsNone(parse_bool_option("   "))

    def test_ask_confirmation_answers(self):
        self.assertTrue(ask_confirmation("?", input_fn=lambda _: "y"))
        self.assertTrue(ask_confirmation("?", input_fn=lambda _: " YES "))
        self.assertFalse(ask_confirmation("?", input_fn=lambda _: "n"))
        self.assertFalse(ask_confirmation("?", input_fn=lambda _: "whatever"))

    def test_ask_confirmation_default(self):
        self.assertFalse(ask_confirmation("?", input_fn=lambda _: ""))
        self.assertTrue(ask_confirmation("?", default=True, input_fn=lambda _: ""))

    def test_ask_confirmation_eof(self):
        def closed(_):
            raise EOFError

        self.assertFalse(ask_confirmation("?", input_fn=closed))

    def test_prompt_text_passed(self):
        seen = []
        ask_confirmation("Write BaseURL? ", input_fn=lambda q: seen.append(q) or "")
        self.assertEqual(seen, ["Write BaseURL? "])


if __name__ == "__main__":
    unittest.main()
