import contextlib
import io
import unittest

from bitstamp_client.main import _parse_params, main


class CommandLineTest(unittest.TestCase):
    def test_params_are_split_on_first_equals(self) -> None:
        self.assertEqual({"amount": "0.5", "note": "a=b"}, _parse_params(["amount=0.5", "note=a=b"]))

    def test_param_without_value_is_rejected(self) -> None:
        with self.assertRaises(SystemExit):
            _parse_params(["amount"])

    def test_unknown_pair_is_rejected(self) -> None:
        for argv in (["stream", "--pair", "dogeusd"], ["call", "ticker", "--pair", "dogeusd"]):
            with self.subTest(argv=argv), contextlib.redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit) as ctx:
                    main(argv)
                self.assertEqual(2, ctx.exception.code)


if __name__ == "__main__":
    unittest.main()
