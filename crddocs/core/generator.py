"""Generator orchestrating repositories, definitions and documentation pages.

For each configured repository the generator:

1. ensures a shallow checkout exists,
2. collects candidate definition files,
3. reads every file, skipping files that fail to read,
4. derives a CRD from the first XRD seen for every name, and
5. hands each CRD with its examples and annotations to the page writer.

Only acquisition and configuration errors abort a run. Errors about a
single file, definition or page are logged and the run continues.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from crddocs.core.config import read_configuration, resolve_template_path
from crddocs.core.errors import AnnotationError, EmitError, FileReadError, SchemaParseError
from crddocs.core.schema.annotation import AnnotationRecord, filter_for_crd
from crddocs.core.schema.repository import SourceRepository
from crddocs.docs.annotations import collect_annotations
from crddocs.docs.output import write_page
from crddocs.k8s.composite import derive_crd, get_description
from crddocs.k8s.reader import read_definitions
from crddocs.k8s.resources import CompositeResourceDefinition, CustomResourceDefinition
from crddocs.repository.checkout import ensure_checkout

logger = logging.getLogger(__name__)

# Within a clone, folder holding upstream CRDs
UPSTREAM_CRD_FOLDER = "helm"

# File name of bespoke upstream CRDs
UPSTREAM_FILE_NAME = "upstream.yaml"

# Within a clone, folder holding annotation Go sources
ANNOTATIONS_FOLDER = "pkg/annotation"

CRD_FILE_SUFFIX = ".yaml"

PageWriter = Callable[..., Path]


@dataclass
class GeneratorSettings:
    """Settings coming in as command line flags.

    Attributes:
        config_file_path: Path to the configuration file
        cr_folder: Folder of example CRs, relative to a clone
        crd_folder: Folder of CRDs, relative to a clone
        output_folder_path: Folder pages are written to
        repo_folder: Folder repositories are cloned into
    """
    config_file_path: str = "./config.yaml"
    cr_folder: str = "docs/cr"
    crd_folder: str = "config/crd"
    output_folder_path: str = "./output"
    repo_folder: str = "/tmp/gitclone"


def clone_path_for(repo_folder: str, source_repo: SourceRepository) -> Path:
    return Path(repo_folder) / source_repo.organization / source_repo.short_name


def collect_crd_files(clone_path: Path, crd_folder: str) -> Set[Path]:
    """Collect candidate definition files of a checkout.

    Candidates are every ``*.yaml`` file under ``crd_folder`` plus every
    ``upstream.yaml`` under the upstream folder. Missing folders
    contribute nothing.

    Returns:
        Set of candidate paths
    """
    crd_files: Set[Path] = set()

    own_folder = clone_path / crd_folder
    if own_folder.is_dir():
        crd_files.update(
            p for p in own_folder.rglob(f"*{CRD_FILE_SUFFIX}") if p.is_file()
        )

    upstream_folder = clone_path / UPSTREAM_CRD_FOLDER
    if upstream_folder.is_dir():
        crd_files.update(
            p for p in upstream_folder.rglob(UPSTREAM_FILE_NAME) if p.is_file()
        )

    return crd_files


def read_examples(
    crd: CustomResourceDefinition, clone_path: Path, cr_folder: str, short_name: str = ""
) -> Dict[str, str]:
    """Load the example CR of every served version that has one.

    The example for a version lives at
    ``<clone>/<cr_folder>/<group>_<version>_<singular>.yaml``.

    Returns:
        Mapping of version name to trimmed example YAML
    """
    examples: Dict[str, str] = {}
    for version in crd.versions:
        if not version.served:
            continue
        cr_file = clone_path / cr_folder / f"{crd.group}_{version.name}_{crd.names.singular}.yaml"
        try:
            examples[version.name] = cr_file.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            logger.warning(
                f"repo {short_name} - CR example is missing or unreadable for {crd.name} version {version.name} in path {cr_file}"
            )
    return examples


def write_definition(
    crd: CustomResourceDefinition,
    source_repo: SourceRepository,
    clone_path: Path,
    settings: GeneratorSettings,
    repo_annotations: List[AnnotationRecord],
    template_path: Path,
    writer: PageWriter = write_page,
    fallback_description: str = "",
) -> Optional[Path]:
    """Write the documentation page of one CRD.

    CRDs without configured metadata, and hidden CRDs, are skipped. When
    the metadata has no description, ``fallback_description`` is used.

    Returns:
        Path of the written page, or None if skipped or failed
    """
    versions = [v.name for v in crd.versions]
    logger.info(f"repo {source_repo.short_name} - processing CRD {crd.name} with versions {versions}")

    metadata = source_repo.metadata.get(crd.name)
    if metadata is None:
        logger.warning(f"repo {source_repo.short_name} - skipping {crd.name} as no metadata found")
        return None
    if metadata.hidden:
        logger.info(f"repo {source_repo.short_name} - skipping {crd.name} as hidden by configuration")
        return None
    if not metadata.description and fallback_description:
        metadata = replace(metadata, description=fallback_description)

    example_crs = read_examples(crd, clone_path, settings.cr_folder, source_repo.short_name)
    crd_annotations = filter_for_crd(repo_annotations, crd.name)

    try:
        return writer(
            crd,
            crd_annotations,
            metadata,
            example_crs,
            settings.output_folder_path,
            source_repo.url,
            source_repo.commit_reference,
            template_path,
        )
    except EmitError as e:
        logger.warning(f"repo {source_repo.short_name} - could not write page for {crd.name}: {e}")
        return None


def process_repository(
    source_repo: SourceRepository,
    clone_path: Path,
    settings: GeneratorSettings,
    template_path: Path,
    writer: PageWriter = write_page,
) -> List[Path]:
    """Generate pages for all composite resources of one checkout.

    The first XRD seen for a name wins; later XRDs with the same name in
    this repository are skipped. Files are visited in sorted path order.

    Returns:
        Paths of the pages written
    """
    crd_files = collect_crd_files(clone_path, settings.crd_folder)

    annotations_folder = clone_path / ANNOTATIONS_FOLDER
    logger.info(f"repo {source_repo.short_name} - collecting annotations in {annotations_folder}")
    try:
        repo_annotations = collect_annotations(annotations_folder)
    except AnnotationError as e:
        logger.error(f"repo {source_repo.short_name} - collecting annotations yielded error: {e}")
        repo_annotations = []

    seen_names: Set[str] = set()
    pages: List[Path] = []

    for crd_file in sorted(crd_files):
        logger.info(f"repo {source_repo.short_name} - reading CRDs from file {crd_file}")
        try:
            definitions = read_definitions(crd_file)
        except FileReadError as e:
            logger.warning(f"repo {source_repo.short_name} - skipping file {crd_file}: {e}")
            continue

        for rd in definitions:
            if not isinstance(rd, CompositeResourceDefinition):
                logger.info(f"repo {source_repo.short_name} - resource kind {rd.kind} not supported, skipping {rd.name}")
                continue
            if rd.name in seen_names:
                logger.debug(f"repo {source_repo.short_name} - {rd.name} already seen, skipping {crd_file}")
                continue
            seen_names.add(rd.name)

            try:
                crd = derive_crd(rd)
            except SchemaParseError as e:
                logger.warning(f"repo {source_repo.short_name} - cannot derive CRD for {rd.name}: {e}")
                continue

            page = write_definition(
                crd, source_repo, clone_path, settings, repo_annotations, template_path, writer,
                fallback_description=get_description(rd),
            )
            if page is not None:
                pages.append(page)

    return pages


def generate_crd_docs(settings: GeneratorSettings, writer: PageWriter = write_page) -> List[Path]:
    """Generate documentation pages for all configured repositories.

    Args:
        settings: Command line settings
        writer: Page writer (write_page unless testing)

    Returns:
        Paths of all pages written

    Raises:
        ConfigError: If the configuration cannot be read
        AcquisitionError: If a repository cannot be cloned
    """
    configuration = read_configuration(settings.config_file_path)
    template_path = resolve_template_path(settings.config_file_path, configuration.template_path)

    pages: List[Path] = []
    for source_repo in configuration.source_repositories:
        logger.info(f"repo {source_repo.short_name} ({source_repo.url})")
        clone_path = ensure_checkout(
            source_repo.url,
            source_repo.commit_reference,
            clone_path_for(settings.repo_folder, source_repo),
        )
        pages.extend(process_repository(source_repo, clone_path, settings, template_path, writer))

    logger.info(f"Wrote {len(pages)} pages to {settings.output_folder_path}")
    return pages
