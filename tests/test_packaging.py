import fnmatch
import os
import unittest

import core

try:
    import tomllib
except ImportError:  # Python 3.10
    tomllib = None

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@unittest.skipIf(tomllib is None, "tomllib needs Python 3.11+")
class TestParsersAreInstalled(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        with open(os.path.join(ROOT, "pyproject.toml"), "rb") as f:
            cls.setuptools = tomllib.load(f)["tool"]["setuptools"]

    def test_parsers_dir_sits_next_to_core(self):
        core_dir = os.path.dirname(os.path.abspath(core.__file__))
        self.assertEqual(core.PARSERS_DIR, os.path.join(core_dir, "Parsers"))
        self.assertIn("core", self.setuptools["py-modules"])

    def test_parsers_folder_is_shipped(self):
        self.assertIn("Parsers", self.setuptools["packages"])
        patterns = self.setuptools["package-data"]["Parsers"]
        shipped = [
            name
            for name in os.listdir(core.PARSERS_DIR)
            if any(fnmatch.fnmatch(name, p) for p in patterns)
        ]
        for name in core.PARSER_ORDER:
            with self.subTest(parser=name):
                module = core.load_parser_module(name)
                self.assertIn(os.path.basename(module.__file__), shipped)


if __name__ == "__main__":
    unittest.main()
