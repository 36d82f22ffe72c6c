import unittest

from peak_report.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata(self):
        self.assertEqual(app.title, "Peak Report")
        paths = {route.path for route in app.routes}
        self.assertTrue({"/health", "/slack/command", "/test"} <= paths)


if __name__ == "__main__":
    unittest.main()
