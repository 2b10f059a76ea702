"""Tests for the generator's discovery, dedup and enrichment loops."""

import logging
from pathlib import Path

import pytest

from crddocs.core.config import DEFAULT_TEMPLATE_PATH
from crddocs.core.errors import EmitError
from crddocs.core.generator import (
    GeneratorSettings,
    clone_path_for,
    collect_crd_files,
    process_repository,
    read_examples,
    write_definition,
)
from crddocs.core.schema.annotation import AnnotationRecord
from crddocs.core.schema.repository import CRDMetadata, SourceRepository
from crddocs.k8s.composite import derive_crd
from crddocs.k8s.reader import decode


XRD_TEMPLATE = """apiVersion: apiextensions.crossplane.io/v1
kind: CompositeResourceDefinition
metadata:
  name: {plural}.example.io
  labels:
    origin: {origin}
spec:
  group: example.io
  names:
    kind: {kind}
    plural: {plural}
    singular: {singular}
  versions:
  - name: v1alpha1
    served: true
    referenceable: false
  - name: v1beta1
    served: true
    referenceable: false
  - name: v1
    served: true
    referenceable: true
"""


def xrd_yaml(kind="Widget", plural="widgets", singular="widget", origin="first"):
    return XRD_TEMPLATE.format(kind=kind, plural=plural, singular=singular, origin=origin)


PLAIN_CRD = """apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
metadata:
  name: plain.example.io
spec:
  group: example.io
  scope: Namespaced
  names:
    kind: Plain
    plural: plain
  versions:
  - name: v1
    served: true
    storage: true
"""


class RecordingWriter:
    """Page writer that records its arguments instead of rendering."""

    def __init__(self, fail_for=()):
        self.calls = []
        self.fail_for = set(fail_for)

    def __call__(self, crd, annotations, metadata, example_crs, output_folder, repo_url, repo_ref, template_path):
        if crd.name in self.fail_for:
            raise EmitError(f"boom for {crd.name}", name=crd.name)
        self.calls.append({
            "crd": crd,
            "annotations": annotations,
            "metadata": metadata,
            "example_crs": example_crs,
            "output_folder": output_folder,
            "repo_url": repo_url,
            "repo_ref": repo_ref,
            "template_path": template_path,
        })
        return Path(output_folder) / f"{crd.name}.md"


def make_repo(metadata=None):
    if metadata is None:
        metadata = {
            "widgets.example.io": CRDMetadata(description="Widgets."),
            "gadgets.example.io": CRDMetadata(description="Gadgets."),
        }
    return SourceRepository(
        url="https://github.com/example/platform",
        organization="example",
        short_name="platform",
        commit_reference="v1.2.0",
        metadata=metadata,
    )


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def settings(tmp_path: Path):
    return GeneratorSettings(
        config_file_path=str(tmp_path / "config.yaml"),
        output_folder_path=str(tmp_path / "output"),
        repo_folder=str(tmp_path / "repos"),
    )


class TestCollectCrdFiles:
    """Tests for collect_crd_files()."""

    def test_both_conventions(self, tmp_path: Path):
        """Test collecting own CRDs by suffix and upstream CRDs by name."""
        own = write(tmp_path / "config" / "crd" / "widgets.yaml", "")
        nested = write(tmp_path / "config" / "crd" / "bases" / "gadgets.yaml", "")
        write(tmp_path / "config" / "crd" / "README.md", "")
        upstream = write(tmp_path / "helm" / "chart" / "templates" / "upstream.yaml", "")
        write(tmp_path / "helm" / "chart" / "values.yaml", "")
        write(tmp_path / "helm" / "chart" / "my-upstream.yaml", "")

        files = collect_crd_files(tmp_path, "config/crd")

        assert files == {own, nested, upstream}

    def test_missing_folders(self, tmp_path: Path):
        """Test that missing folders yield no candidates."""
        assert collect_crd_files(tmp_path, "config/crd") == set()

    def test_same_file_counted_once(self, tmp_path: Path):
        """Test that a file matching both conventions appears once."""
        upstream = write(tmp_path / "helm" / "upstream.yaml", "")

        files = collect_crd_files(tmp_path, "helm")

        assert files == {upstream}


class TestClonePath:
    """Tests for clone_path_for()."""

    def test_organization_and_short_name(self):
        """Test the per-repository clone path."""
        assert clone_path_for("/tmp/gitclone", make_repo()) == Path("/tmp/gitclone/example/platform")


class TestReadExamples:
    """Tests for read_examples()."""

    def test_partial_examples(self, tmp_path: Path):
        """Test that only versions with an example file are mapped."""
        crd = derive_crd(decode(xrd_yaml()))
        write(tmp_path / "docs" / "cr" / "example.io_v1alpha1_widget.yaml", "\nkind: Widget\n\n")
        write(tmp_path / "docs" / "cr" / "example.io_v1_widget.yaml", "kind: Widget # v1\n")

        examples = read_examples(crd, tmp_path, "docs/cr")

        assert examples == {"v1alpha1": "kind: Widget", "v1": "kind: Widget # v1"}

    def test_undecodable_example_skipped(self, tmp_path: Path, caplog):
        """Test that an example that is not UTF-8 is logged and left out."""
        crd = derive_crd(decode(xrd_yaml()))
        bad = tmp_path / "docs" / "cr" / "example.io_v1alpha1_widget.yaml"
        bad.parent.mkdir(parents=True)
        bad.write_bytes(b"\xff\xfe bad")
        write(tmp_path / "docs" / "cr" / "example.io_v1_widget.yaml", "kind: Widget\n")

        with caplog.at_level(logging.WARNING):
            examples = read_examples(crd, tmp_path, "docs/cr")

        assert examples == {"v1": "kind: Widget"}
        assert "example.io_v1alpha1_widget.yaml" in caplog.text

    def test_unserved_versions_skipped(self, tmp_path: Path):
        """Test that examples are only looked up for served versions."""
        crd = derive_crd(decode(xrd_yaml().replace(
            "  - name: v1alpha1\n    served: true", "  - name: v1alpha1\n    served: false"
        )))
        write(tmp_path / "docs" / "cr" / "example.io_v1alpha1_widget.yaml", "kind: Widget\n")

        assert read_examples(crd, tmp_path, "docs/cr") == {}


class TestWriteDefinition:
    """Tests for write_definition()."""

    def test_missing_metadata_skipped(self, tmp_path: Path, settings, caplog):
        """Test that CRDs without metadata produce no page and a warning."""
        crd = derive_crd(decode(xrd_yaml()))
        writer = RecordingWriter()

        with caplog.at_level(logging.WARNING):
            result = write_definition(crd, make_repo(metadata={}), tmp_path, settings, [], Path("t.j2"), writer)

        assert result is None
        assert writer.calls == []
        assert "no metadata found" in caplog.text

    def test_hidden_skipped(self, tmp_path: Path, settings):
        """Test that hidden CRDs produce no page."""
        crd = derive_crd(decode(xrd_yaml()))
        writer = RecordingWriter()
        repo = make_repo(metadata={"widgets.example.io": CRDMetadata(hidden=True)})

        result = write_definition(crd, repo, tmp_path, settings, [], Path("t.j2"), writer)

        assert result is None
        assert writer.calls == []

    def test_writer_receives_enriched_input(self, tmp_path: Path, settings):
        """Test the tuple handed to the page writer."""
        crd = derive_crd(decode(xrd_yaml()))
        write(tmp_path / "docs" / "cr" / "example.io_v1_widget.yaml", "kind: Widget\n")
        annotations = [
            AnnotationRecord("example.io/a", "widgets.example.io", "v1"),
            AnnotationRecord("example.io/b", "gadgets.example.io", "v1"),
        ]
        writer = RecordingWriter()

        result = write_definition(crd, make_repo(), tmp_path, settings, annotations, Path("t.j2"), writer)

        assert result == Path(settings.output_folder_path) / "widgets.example.io.md"
        call = writer.calls[0]
        assert call["crd"] is crd
        assert [a.annotation for a in call["annotations"]] == ["example.io/a"]
        assert call["metadata"].description == "Widgets."
        assert call["example_crs"] == {"v1": "kind: Widget"}
        assert call["repo_url"] == "https://github.com/example/platform"
        assert call["repo_ref"] == "v1.2.0"
        assert call["template_path"] == Path("t.j2")

    def test_metadata_description_used(self, tmp_path: Path, settings):
        """Test that a configured description is kept over the fallback."""
        crd = derive_crd(decode(xrd_yaml()))
        writer = RecordingWriter()

        write_definition(
            crd, make_repo(), tmp_path, settings, [], Path("t.j2"), writer,
            fallback_description="From the schema.",
        )

        assert writer.calls[0]["metadata"].description == "Widgets."

    def test_fallback_description(self, tmp_path: Path, settings):
        """Test that the fallback fills in a missing configured description."""
        crd = derive_crd(decode(xrd_yaml()))
        writer = RecordingWriter()
        repo = make_repo(metadata={"widgets.example.io": CRDMetadata(topics=["workloads"])})

        write_definition(
            crd, repo, tmp_path, settings, [], Path("t.j2"), writer,
            fallback_description="From the schema.",
        )

        metadata = writer.calls[0]["metadata"]
        assert metadata.description == "From the schema."
        assert metadata.topics == ["workloads"]
        assert repo.metadata["widgets.example.io"].description == ""

    def test_emit_error_logged(self, tmp_path: Path, settings, caplog):
        """Test that a render failure is logged, not raised."""
        crd = derive_crd(decode(xrd_yaml()))
        writer = RecordingWriter(fail_for={"widgets.example.io"})

        with caplog.at_level(logging.WARNING):
            result = write_definition(crd, make_repo(), tmp_path, settings, [], Path("t.j2"), writer)

        assert result is None
        assert "boom for widgets.example.io" in caplog.text


class TestProcessRepository:
    """Tests for process_repository()."""

    def test_first_occurrence_wins(self, tmp_path: Path, settings):
        """Test that a name defined in two files is taken from the first."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml(origin="first"))
        write(tmp_path / "config" / "crd" / "b.yaml", xrd_yaml(origin="second"))
        writer = RecordingWriter()

        pages = process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert len(pages) == 1
        assert len(writer.calls) == 1
        assert writer.calls[0]["crd"].metadata.labels == {"origin": "first"}

    def test_dedup_within_one_file(self, tmp_path: Path, settings):
        """Test that a repeated name inside one file is also skipped."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml(origin="first") + "---\n" + xrd_yaml(origin="second"))
        writer = RecordingWriter()

        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert [c["crd"].metadata.labels["origin"] for c in writer.calls] == ["first"]

    def test_dedup_scoped_per_repository(self, tmp_path: Path, settings):
        """Test that each repository run starts with a fresh dedup set."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml())
        writer = RecordingWriter()

        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)
        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert len(writer.calls) == 2

    def test_malformed_file_does_not_stop_siblings(self, tmp_path: Path, settings, caplog):
        """Test that one unparsable file is skipped and the rest processed."""
        write(tmp_path / "config" / "crd" / "a.yaml", "kind: [unclosed\n")
        write(tmp_path / "config" / "crd" / "b.yaml", xrd_yaml())
        write(tmp_path / "helm" / "upstream.yaml", xrd_yaml(kind="Gadget", plural="gadgets", singular="gadget"))
        writer = RecordingWriter()

        with caplog.at_level(logging.WARNING):
            process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert sorted(c["crd"].name for c in writer.calls) == ["gadgets.example.io", "widgets.example.io"]
        assert "skipping file" in caplog.text

    def test_unsupported_kind_skipped(self, tmp_path: Path, settings):
        """Test that plain CRDs are skipped without error."""
        write(tmp_path / "config" / "crd" / "a.yaml", PLAIN_CRD + "---\n" + xrd_yaml())
        writer = RecordingWriter()

        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert [c["crd"].name for c in writer.calls] == ["widgets.example.io"]

    def test_schema_error_drops_only_that_definition(self, tmp_path: Path, settings):
        """Test that a malformed version schema drops just its definition."""
        broken = xrd_yaml(kind="Gadget", plural="gadgets", singular="gadget").replace(
            "    referenceable: true\n",
            "    referenceable: true\n    schema:\n      openAPIV3Schema: '{broken'\n",
        )
        write(tmp_path / "config" / "crd" / "a.yaml", broken)
        write(tmp_path / "config" / "crd" / "b.yaml", xrd_yaml())
        writer = RecordingWriter()

        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert [c["crd"].name for c in writer.calls] == ["widgets.example.io"]

    def test_emit_failure_does_not_stop_loop(self, tmp_path: Path, settings):
        """Test that one failing page does not prevent the others."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml(kind="Gadget", plural="gadgets", singular="gadget"))
        write(tmp_path / "config" / "crd" / "b.yaml", xrd_yaml())
        writer = RecordingWriter(fail_for={"gadgets.example.io"})

        pages = process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert pages == [Path(settings.output_folder_path) / "widgets.example.io.md"]

    def test_unrenderable_definition_does_not_stop_loop(self, tmp_path: Path, settings):
        """Test that a page failing to build is skipped and the rest written."""
        broken = xrd_yaml(kind="Gadget", plural="gadgets", singular="gadget").replace(
            "    referenceable: true\n",
            "    referenceable: true\n"
            "    schema:\n"
            "      openAPIV3Schema:\n"
            "        type: object\n"
            "        properties:\n"
            "          spec:\n"
            "            type: object\n"
            "            properties:\n"
            "              foo: string\n",
        )
        write(tmp_path / "config" / "crd" / "a.yaml", broken)
        write(tmp_path / "config" / "crd" / "b.yaml", xrd_yaml())

        pages = process_repository(make_repo(), tmp_path, settings, DEFAULT_TEMPLATE_PATH)

        assert [p.name for p in pages] == ["widgets.example.io.md"]
        assert (Path(settings.output_folder_path) / "widgets.example.io.md").exists()

    def test_schema_description_used_as_fallback(self, tmp_path: Path, settings):
        """Test that the XRD schema description reaches the page writer."""
        described = xrd_yaml().replace(
            "    referenceable: true\n",
            "    referenceable: true\n"
            "    schema:\n"
            "      openAPIV3Schema:\n"
            "        description: Widgets bundle gadgets.\n"
            "        type: object\n",
        )
        write(tmp_path / "config" / "crd" / "a.yaml", described)
        writer = RecordingWriter()
        repo = make_repo(metadata={"widgets.example.io": CRDMetadata()})

        process_repository(repo, tmp_path, settings, Path("t.j2"), writer)

        assert writer.calls[0]["metadata"].description == "Widgets bundle gadgets."

    def test_annotations_collected_and_filtered(self, tmp_path: Path, settings):
        """Test that repository annotations reach the matching CRD only."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml())
        write(
            tmp_path / "pkg" / "annotation" / "widgets.go",
            "package annotation\n\n"
            "// support:\n"
            "//   - crd: widgets.example.io\n"
            "//     apiversion: v1\n"
            "//   - crd: gadgets.example.io\n"
            "// documentation:\n"
            "//   Warms gadgets.\n"
            'const Warm = "example.io/warm"\n',
        )
        writer = RecordingWriter()

        process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        annotations = writer.calls[0]["annotations"]
        assert [(a.annotation, a.crd_name) for a in annotations] == [("example.io/warm", "widgets.example.io")]

    def test_missing_annotations_degrade_to_none(self, tmp_path: Path, settings, caplog):
        """Test that failing annotation collection yields no annotations."""
        write(tmp_path / "config" / "crd" / "a.yaml", xrd_yaml())
        writer = RecordingWriter()

        with caplog.at_level(logging.ERROR):
            process_repository(make_repo(), tmp_path, settings, Path("t.j2"), writer)

        assert writer.calls[0]["annotations"] == []
        assert "collecting annotations yielded error" in caplog.text
