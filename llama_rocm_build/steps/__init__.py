"""Build checkpoints.

This package holds the ordered steps of a build run:
- source: clone or update the llama.cpp tree
- packages: pacman audit and optional installs
- toolchain: ROCm root validation and environment discovery
- cmake: build directory reset, option prompts, configure and build
- report: produced binaries, GPU detection and closing summary

Steps are plain functions taking a LogSink and, where needed, a
CommandRunner and Prompter. Fatal failures raise BuildAbortedError.
"""
