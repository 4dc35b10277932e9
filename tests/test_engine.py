"""
Tests for the extraction engine and the command-line interface.
"""

import json
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

from astfeatures.cli import cli
from astfeatures.core.config import Config, ExtractionConfig
from astfeatures.core.exceptions import CompilationError, FrontendError, LanguageNotSupportedError
from astfeatures.engine import ExtractionSummary, FeatureExtractor, extract_graph
from astfeatures.graph.feature_graph import FeatureGraph, NodeType


GOOD_SOURCE = """\
class Greeter {
  String greet(String name) {
    if (name == null) {
      return "hello";
    }
    return "hello " + name;
  }
}
"""

BAD_SOURCE = "class Broken {\n  void f( {\n}\n"


def write_tree(root: Path) -> None:
    (root / "src" / "app").mkdir(parents=True)
    (root / "src" / "app" / "Greeter.java").write_text(GOOD_SOURCE)
    (root / "src" / "app" / "Broken.java").write_text(BAD_SOURCE)
    (root / "src" / "app" / "notes.txt").write_text("not java")
    (root / "build").mkdir()
    (root / "build" / "Generated.java").write_text(GOOD_SOURCE)


class TestFeatureExtractor(unittest.TestCase):
    """Tests for the feature extractor."""

    def setUp(self):
        self.config = ExtractionConfig()
        self.extractor = FeatureExtractor(self.config)

    def test_extract_source(self):
        """Test building a graph from source text."""
        graph = self.extractor.extract_source(GOOD_SOURCE, "Greeter.java")

        self.assertEqual(graph.root.contents, "COMPILATION_UNIT")
        self.assertEqual(graph.source_file, "Greeter.java")
        self.assertEqual(len(graph.nodes_by_contents("IF")), 1)
        self.assertEqual(len(graph.nodes_by_contents("RETURN")), 2)
        self.assertTrue(graph.get_statistics()["is_tree"])

    def test_line_numbers(self):
        """Test that line numbers follow the configuration."""
        graph = self.extractor.extract_source(GOOD_SOURCE, "Greeter.java")
        (if_node,) = graph.nodes_by_contents("IF")
        self.assertEqual((if_node.start_line, if_node.end_line), (3, 5))

        self.config.graph.compute_line_numbers = False
        graph = self.extractor.extract_source(GOOD_SOURCE, "Greeter.java")
        (if_node,) = graph.nodes_by_contents("IF")
        self.assertEqual(if_node.start_line, -1)

    def test_language_detection(self):
        """Test picking the language from the file name."""
        self.assertEqual(self.extractor.language_for("Foo.java"), "java")
        self.assertEqual(self.extractor.language_for("Foo.unknown"), "java")

        self.config.frontend.default_language = "cobol"
        with self.assertRaises(LanguageNotSupportedError):
            self.extractor.extract_source("", "Foo.unknown")

    def test_compile_error(self):
        """Test that syntax errors propagate."""
        with self.assertRaises(CompilationError):
            self.extractor.extract_source(BAD_SOURCE, "Broken.java")

    def test_extract_file(self):
        """Test extracting and saving a single file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            source = Path(tmpdir) / "Greeter.java"
            source.write_text(GOOD_SOURCE)
            output = Path(tmpdir) / "out" / "greeter.json"

            graph = self.extractor.extract_file(source, output)

            self.assertTrue(output.exists())
            self.assertEqual(FeatureGraph.load(output).node_count, graph.node_count)

    def test_extract_file_compressed(self):
        """Test that the compression setting applies to saved graphs."""
        self.config.storage.enable_compression = True
        with tempfile.TemporaryDirectory() as tmpdir:
            source = Path(tmpdir) / "Greeter.java"
            source.write_text(GOOD_SOURCE)

            self.extractor.extract_file(source, Path(tmpdir) / "greeter.json")

            self.assertTrue((Path(tmpdir) / "greeter.json.gz").exists())

    def test_extract_missing_file(self):
        """Test extracting a file that does not exist."""
        with self.assertRaises(FrontendError):
            self.extractor.extract_file(Path("/nonexistent/Foo.java"))

    def test_extract_large_file(self):
        """Test the file size limit."""
        self.config.frontend.max_file_size = 10
        with tempfile.TemporaryDirectory() as tmpdir:
            source = Path(tmpdir) / "Greeter.java"
            source.write_text(GOOD_SOURCE)

            with self.assertRaises(FrontendError):
                self.extractor.extract_file(source)

    def test_extract_directory(self):
        """Test batch extraction with per-file failures."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "project"
            write_tree(root)
            output_dir = Path(tmpdir) / "graphs"

            summary = self.extractor.extract_directory(root, output_dir)

            self.assertIsInstance(summary, ExtractionSummary)
            self.assertEqual(summary.written, [str(Path("src/app/Greeter.java"))])
            self.assertEqual(list(summary.failures), [str(Path("src/app/Broken.java"))])
            self.assertEqual(summary.succeeded, 1)
            self.assertEqual(summary.failed, 1)
            self.assertGreater(summary.total_nodes, 0)
            self.assertTrue((output_dir / "src" / "app" / "Greeter.java.json").exists())
            self.assertFalse((output_dir / "build").exists())

            data = summary.to_dict()
            self.assertEqual(data["succeeded"], 1)
            self.assertIn("Broken.java", json.dumps(data["failures"]))

    def test_extract_directory_skips_large_files(self):
        """Test that oversized files are skipped, not failed."""
        self.config.frontend.max_file_size = 10
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "project"
            write_tree(root)

            summary = self.extractor.extract_directory(root, Path(tmpdir) / "graphs")

            self.assertEqual(summary.succeeded, 0)
            self.assertEqual(summary.failed, 0)
            self.assertEqual(len(summary.skipped), 2)

    def test_extract_directory_invalid(self):
        """Test batch extraction of a missing directory."""
        with self.assertRaises(FrontendError):
            self.extractor.extract_directory(Path("/nonexistent/project"))

    def test_extract_graph_helper(self):
        """Test the convenience function."""
        graph = extract_graph(GOOD_SOURCE, "Greeter.java", self.config)

        self.assertGreater(len(graph.nodes_by_type(NodeType.FAKE_AST)), 0)


class TestCli(unittest.TestCase):
    """Tests for the command-line interface."""

    def setUp(self):
        Config.reset()
        self.runner = CliRunner()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()
        Config.reset()

    def invoke(self, *args):
        return self.runner.invoke(cli, list(args), obj={})

    def test_extract_to_stdout(self):
        """Test printing a graph as JSON."""
        source = self.root / "Greeter.java"
        source.write_text(GOOD_SOURCE)

        result = self.invoke("extract", str(source))

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.stdout)
        self.assertEqual(data["nodes"][0]["contents"], "COMPILATION_UNIT")

    def test_extract_to_file(self):
        """Test saving a graph."""
        source = self.root / "Greeter.java"
        source.write_text(GOOD_SOURCE)
        output = self.root / "greeter.json"

        result = self.invoke("extract", str(source), "-o", str(output), "--compress")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue((self.root / "greeter.json.gz").exists())
        self.assertIn("Graph saved to", result.output)

    def test_extract_compile_error(self):
        """Test that syntax errors exit with status 1."""
        source = self.root / "Broken.java"
        source.write_text(BAD_SOURCE)

        result = self.invoke("extract", str(source))

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Compilation failed", result.output)

    def test_extract_missing_file(self):
        """Test extracting a file that does not exist."""
        result = self.invoke("extract", str(self.root / "Missing.java"))

        self.assertEqual(result.exit_code, 1)
        self.assertIn("does not exist", result.output)

    def test_batch(self):
        """Test batch extraction."""
        project = self.root / "project"
        write_tree(project)
        output_dir = self.root / "graphs"

        result = self.invoke("batch", str(project), "-o", str(output_dir))

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Succeeded: 1", result.output)
        self.assertIn("Failed:    1", result.output)
        self.assertTrue((output_dir / "src" / "app" / "Greeter.java.json").exists())

    def test_stats(self):
        """Test graph statistics output."""
        graph = FeatureExtractor(ExtractionConfig()).extract_source(GOOD_SOURCE, "Greeter.java")
        path = graph.save(self.root / "greeter.json")

        result = self.invoke("stats", str(path))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(f"Nodes: {graph.node_count}", result.output)
        self.assertIn("Root: COMPILATION_UNIT", result.output)
        self.assertNotIn("Graph loaded", result.output)

    def test_stats_top(self):
        """Test limiting the label listing."""
        graph = FeatureExtractor(ExtractionConfig()).extract_source(GOOD_SOURCE, "Greeter.java")
        path = graph.save(self.root / "greeter.json")

        result = self.invoke("stats", str(path), "--top", "1")

        self.assertEqual(result.exit_code, 0, result.output)
        listing = result.output.split("Most frequent labels:")[1]
        self.assertEqual(len(listing.strip().splitlines()), 1)

    def test_init(self):
        """Test writing a default configuration file."""
        output = self.root / "config.json"

        result = self.invoke("init", "-o", str(output))

        self.assertEqual(result.exit_code, 0, result.output)
        with open(output) as f:
            self.assertIn("frontend", json.load(f))

    def test_config_option(self):
        """Test loading configuration from a file."""
        config_path = self.root / "config.json"
        config_path.write_text(json.dumps({"storage": {"output_dir": str(self.root / "custom")}}))
        project = self.root / "project"
        (project).mkdir()
        (project / "Greeter.java").write_text(GOOD_SOURCE)

        result = self.invoke("--config", str(config_path), "batch", str(project))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue((self.root / "custom" / "Greeter.java.json").exists())

    def test_list_languages(self):
        """Test listing registered front-ends."""
        result = self.invoke("list-languages")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("java: .java", result.output)


if __name__ == "__main__":
    unittest.main()
