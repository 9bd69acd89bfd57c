import os
from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


@task
def update(c):
    """Update all dependencies to their latest versions using poetry."""
    c.run("poetry update")


@task
def up(c):
    """Alias for update - update all dependencies to their latest versions."""
    update(c)


@task
def test(c, path=None):
    """Run the test suite, or the tests under PATH."""
    manage_py = project_relative("manage.py")
    with c.prefix("export DJANGO_SETTINGS_MODULE=papiconv.test_settings"):
        if path:
            c.run(f"python {manage_py} test {path}")
        else:
            c.run(f"python {manage_py} test")


@task
def convert(c, input_file, output_file=None, verbose=False):
    """Convert INPUT_FILE between JSON and PAPI format."""
    manage_py = project_relative("manage.py")
    args = [input_file]
    if output_file:
        args.append(output_file)
    if verbose:
        args.append("--verbose")
    c.run(f"python {manage_py} papi_convert {' '.join(args)}")


@task
def roundtrip(c, json_file):
    """Import JSON_FILE into a scratch PAPI file and export it back next to it."""
    stem = os.path.splitext(json_file)[0]
    convert(c, json_file, f"{stem}.roundtrip.papi")
    convert(c, f"{stem}.roundtrip.papi", f"{stem}.roundtrip.json")
