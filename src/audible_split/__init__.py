"""Audible Split -- cut an audiobook into one MP3 per chapter.

Core modules:
    config       -- Configuration via pydantic-settings; loguru setup. CLI flags
                    are passed as kwargs to SplitConfig (no env pollution).
    cli          -- Click CLI entry point. Exit code 0 only if no chapter failed.
    runner       -- Tool check, chapter probe, job building, dispatch
    orchestrator -- Thread-pool fan-out; one JobOutcome per job, folded into a
                    RunResult. No fail-fast, no retries, no cancellation.
    progress     -- Lock-guarded live progress line shared by all workers
    jobs         -- Chapter -> TranscodeJob; skip-existing check
    sanitize     -- Output name templating and filesystem-safe sanitization
    tools        -- CliTool interface and prerequisite version check
    ffprobe      -- Chapter/tag extraction via ffprobe JSON output
    ffmpeg       -- Per-chapter libmp3lame transcode via ffmpeg subprocess
"""
