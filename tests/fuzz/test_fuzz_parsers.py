import io
import random
import string
import tarfile
import pytest
import yaml
from cdeploy.PARSERS.compose_parser import ComposeParser
from cdeploy.PARSERS.manifest_reader import ManifestReader
from cdeploy.REGISTRY.image_reference import ImageReference

def random_string(length):
    return ''.join(random.choice(string.printable) for _ in range(length))

def test_fuzz_compose_parser():
    parser = ComposeParser(context={})
    for _ in range(100):
        content = random_string(random.randint(0, 1000))
        try:
            parser.parse_from_string(content)
        except (yaml.YAMLError, ValueError):
            # Junk must fail with a parse error, never IndexError/AttributeError
            pass

def test_fuzz_manifest_reader(tmp_path):
    # Tag extraction never raises, whatever the manifest holds
    for i in range(50):
        data = random_string(random.randint(0, 300)).encode()
        path = tmp_path / f"fuzz{i}.tar"
        with tarfile.open(path, "w") as tar:
            info = tarfile.TarInfo("manifest.json")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        assert ManifestReader.first_repo_tag(str(path)) is None or isinstance(
            ManifestReader.first_repo_tag(str(path)), str)

def test_fuzz_random_bytes_as_archive(tmp_path):
    for i in range(50):
        path = tmp_path / f"junk{i}.tar"
        path.write_bytes(bytes(random.getrandbits(8) for _ in range(random.randint(0, 2048))))
        assert ManifestReader.first_repo_tag(str(path)) is None

def test_fuzz_image_reference():
    for _ in range(200):
        text = random_string(random.randint(0, 60))
        try:
            ImageReference.parse(text)
        except ValueError:
            pass
