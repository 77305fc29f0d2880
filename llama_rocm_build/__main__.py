"""Entry point for ``python -m llama_rocm_build``."""

from llama_rocm_build.cli import app

app(prog_name="llama-rocm-build")
