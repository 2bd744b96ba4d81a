"""Transcode job orchestration.

A job walks a fixed stage sequence::

    probe -> build-video-args -> extract-hdr -> transcode-video
          -> inject-hdr -> transcode-audio (once per audio track, optional)
          -> remux -> cleanup

Each stage either completes or raises a PipelineError. The first failure
moves the job to FAILED and no further stage runs, including cleanup: the
temporary files still registered in the job's ArtifactLedger are reported
on the result as leaked. Callers wanting them removed call
:func:`cleanup_artifacts` explicitly.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from hdrsucks.config.models import ToolPathsConfig
from hdrsucks.core.numbers import format_hms
from hdrsucks.core.subprocess_utils import run_command
from hdrsucks.domain.enums import ArtifactKind, CodecType, JobStage, StageStatus
from hdrsucks.domain.models import (
    FrameDescriptor,
    ProbeResult,
    StreamDescriptor,
    TrackTagSet,
)
from hdrsucks.encoder.audio import (
    audio_bitrate_kbps,
    build_audio_decode_args,
    build_audio_encode_args,
)
from hdrsucks.encoder.command import (
    EncoderArgumentSet,
    build_base_encoder_args,
    build_decode_args,
    deinterlace_filter,
    effective_frame_rate,
    effective_span,
    estimate_total_frames,
    extra_arg_tokens,
    quality_args,
)
from hdrsucks.encoder.translate import parse_pix_fmt
from hdrsucks.exceptions import (
    InputValidationError,
    PipelineError,
    ProbeError,
    RemuxError,
    TranscodeError,
)
from hdrsucks.executor.mkvmerge import (
    MkvmergeRemuxer,
    RemuxTrack,
    build_source_excerpt_args,
)
from hdrsucks.executor.pipeline import ProcessPairRunner, run_checked
from hdrsucks.executor.progress import EncodeProgressTracker, parse_audio_progress
from hdrsucks.hdr.sidechannel import HdrSideChannel
from hdrsucks.hdr.sidedata import scan_side_data
from hdrsucks.introspector.ffprobe import FFprobeIntrospector
from hdrsucks.introspector.interface import MediaIntrospector
from hdrsucks.introspector.parsers import resolve_duration, validate_probe_result
from hdrsucks.jobs.artifacts import Artifact, ArtifactLedger, JobPaths
from hdrsucks.jobs.options import EncodeOptions
from hdrsucks.jobs.progress import NullProgressReporter, ProgressReporter
from hdrsucks.logging.context import job_context, stage_context

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".hdr-sucks.mkv"


def default_output_path(input_path: Path, directory: Path | None = None) -> Path:
    """``<directory or cwd>/<input stem>.hdr-sucks.mkv``."""
    return (directory or Path.cwd()) / f"{input_path.stem}{OUTPUT_SUFFIX}"


@dataclass(frozen=True)
class StageOutcome:
    """Result of one executed stage."""

    stage: JobStage
    status: StageStatus
    duration_seconds: float
    track_index: int | None = None
    error: PipelineError | None = None


@dataclass
class JobResult:
    """Final state of a transcode job."""

    job_id: str
    input_path: Path
    output_path: Path
    state: JobStage
    outcomes: list[StageOutcome] = field(default_factory=list)
    error: PipelineError | None = None
    leaked_artifacts: tuple[Artifact, ...] = ()
    ledger: ArtifactLedger | None = field(default=None, repr=False)

    @property
    def success(self) -> bool:
        return self.state == JobStage.DONE

    @property
    def failed_stage(self) -> JobStage | None:
        for outcome in self.outcomes:
            if outcome.status == StageStatus.FAILED:
                return outcome.stage
        return None

    @property
    def failure_message(self) -> str | None:
        """``"<stage> failed: <error>"`` for failed jobs, else None."""
        if self.error is None:
            return None
        stage = self.failed_stage
        label = stage.value if stage is not None else "job"
        return f"{label} failed: {self.error}"


def cleanup_artifacts(result: JobResult) -> list[Artifact]:
    """Remove the temporary files a failed job left behind.

    Args:
        result: Result of a finished job.

    Returns:
        Artifacts that still could not be removed.
    """
    if result.ledger is None:
        return []
    remaining = result.ledger.release_all()
    result.leaked_artifacts = tuple(remaining)
    return remaining


class TranscodeJob:
    """One input file transcoded to one output file.

    Example:
        job = TranscodeJob(Path("movie.mkv"), options=EncodeOptions(crf=18))
        result = job.run()
        if not result.success:
            print(result.failure_message)
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path | None = None,
        options: EncodeOptions | None = None,
        *,
        tools: ToolPathsConfig | None = None,
        work_dir: Path | None = None,
        introspector: MediaIntrospector | None = None,
        runner: ProcessPairRunner | None = None,
        side_channel: HdrSideChannel | None = None,
        remuxer: MkvmergeRemuxer | None = None,
        progress: ProgressReporter | None = None,
        job_id: str | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            input_path: Source media file.
            output_path: Output container; defaults to
                ``<cwd>/<stem>.hdr-sucks.mkv``.
            options: Encode options; defaults apply when None.
            tools: Tool executables; defaults to bare names on PATH.
            work_dir: Directory for temporary files; defaults to cwd.
            introspector: Probe implementation.
            runner: Process pair runner.
            side_channel: Dolby Vision / HDR10+ tool runner.
            remuxer: mkvmerge runner.
            progress: Live progress reporter.
            job_id: Identifier used in log records.
        """
        self.options = options or EncodeOptions()
        self.tools = tools or ToolPathsConfig()
        self.job_id = job_id or secrets.token_hex(3)
        verbose = self.options.verbose

        self.runner = runner or ProcessPairRunner(verbose=verbose)
        self.introspector = introspector or FFprobeIntrospector(self.tools.ffprobe)
        self.side_channel = side_channel or HdrSideChannel(self.tools, self.runner)
        self.remuxer = remuxer or MkvmergeRemuxer(self.tools.mkvmerge, verbose=verbose)
        self.progress: ProgressReporter = progress or NullProgressReporter()

        self.ledger = ArtifactLedger(work_dir or Path.cwd())
        self.paths = JobPaths(
            input=input_path,
            output=output_path or default_output_path(input_path),
            artifacts=self.ledger,
        )
        self.state = JobStage.PENDING

        self._probe: ProbeResult | None = None
        self._video_stream: StreamDescriptor | None = None
        self._video_frame: FrameDescriptor | None = None
        self._encoder_args: EncoderArgumentSet | None = None
        self._decode_args: list[str] = []
        self._total_frames: int | None = None
        self._video_tags = TrackTagSet()
        self._audio_tags: dict[int, TrackTagSet] = {}

    # -- state machine ------------------------------------------------------

    def _stages(self) -> Iterator[tuple[JobStage, Callable[[], None], int | None]]:
        yield JobStage.PROBE, self._run_probe, None
        yield JobStage.BUILD_VIDEO_ARGS, self._run_build_video_args, None
        yield JobStage.EXTRACT_HDR, self._run_extract_hdr, None
        yield JobStage.TRANSCODE_VIDEO, self._run_transcode_video, None
        yield JobStage.INJECT_HDR, self._run_inject_hdr, None
        if self.options.transcode_audio and self._probe is not None:
            for index, stream in enumerate(self._probe.audio_streams):
                yield (
                    JobStage.TRANSCODE_AUDIO,
                    partial(self._run_transcode_audio, index, stream),
                    index,
                )
        yield JobStage.REMUX, self._run_remux, None
        yield JobStage.CLEANUP, self._run_cleanup, None

    def run(self) -> JobResult:
        """Run every stage until one fails or the job is done.

        Returns:
            JobResult; unexpected (non-PipelineError) exceptions propagate.
        """
        outcomes: list[StageOutcome] = []
        with job_context(self.job_id):
            logger.info("Input file: %s", self.paths.input)
            logger.info("Output file: %s", self.paths.output)

            for stage, handler, track_index in self._stages():
                self.state = stage
                started = time.monotonic()
                try:
                    with stage_context(stage.value):
                        handler()
                except PipelineError as e:
                    self.progress.on_complete()
                    e.stage = stage
                    outcomes.append(
                        StageOutcome(
                            stage,
                            StageStatus.FAILED,
                            time.monotonic() - started,
                            track_index,
                            e,
                        )
                    )
                    return self._fail(outcomes, e)
                outcomes.append(
                    StageOutcome(
                        stage,
                        StageStatus.COMPLETED,
                        time.monotonic() - started,
                        track_index,
                    )
                )

            self.state = JobStage.DONE
            logger.info("Done: %s", self.paths.output)
        return JobResult(
            job_id=self.job_id,
            input_path=self.paths.input,
            output_path=self.paths.output,
            state=self.state,
            outcomes=outcomes,
            ledger=self.ledger,
        )

    def _fail(self, outcomes: list[StageOutcome], error: PipelineError) -> JobResult:
        self.state = JobStage.FAILED
        stage = error.stage.value if error.stage else "job"
        logger.error("%s failed: %s", stage, error)
        leaked = self.ledger.pending
        if leaked:
            logger.warning(
                "Leaving %d temporary file(s) behind: %s",
                len(leaked),
                ", ".join(str(a.path) for a in leaked),
            )
        return JobResult(
            job_id=self.job_id,
            input_path=self.paths.input,
            output_path=self.paths.output,
            state=self.state,
            outcomes=outcomes,
            error=error,
            leaked_artifacts=leaked,
            ledger=self.ledger,
        )

    # -- stages -------------------------------------------------------------

    def _run_probe(self) -> None:
        source = self.paths.input
        if not source.is_file():
            raise ProbeError(f"Input file not found: {source}")
        if self.paths.output.resolve() == source.resolve():
            raise InputValidationError("Output path must differ from the input path")

        logger.info("Extracting file metadata")
        self._probe = self.introspector.probe(source)
        self._video_stream, self._video_frame = validate_probe_result(self._probe)

    def _run_build_video_args(self) -> None:
        assert self._probe is not None and self._video_stream is not None
        stream = self._video_stream
        opts = self.options

        pix_fmt = parse_pix_fmt(stream.pix_fmt)
        logger.debug(
            "pix_fmt %s -> csp=%s depth=%s", stream.pix_fmt, pix_fmt.csp, pix_fmt.depth
        )
        self._encoder_args = build_base_encoder_args(
            stream, pix_fmt, opts.keep_bit_depth
        )

        video_filter = deinterlace_filter(stream, opts.double_rate)
        if video_filter:
            logger.info("Interlaced video, using yadif to deinterlace")
        self._decode_args = build_decode_args(
            self.tools.ffmpeg,
            self.paths.input,
            video_filter=video_filter,
            seek=opts.seek,
            time_limit=opts.time_limit,
        )

        fps = effective_frame_rate(stream, opts.double_rate)
        duration = resolve_duration(stream, self._probe.format)
        self._total_frames = estimate_total_frames(
            duration, fps, opts.seek, opts.time_limit
        )
        span = effective_span(duration, opts.seek, opts.time_limit)
        logger.info(
            "Length: %s, Frames: ~%s",
            format_hms(span),
            self._total_frames if self._total_frames is not None else "unknown",
        )
        self._video_tags = TrackTagSet.from_stream(stream)

    def _run_extract_hdr(self) -> None:
        assert self._video_stream is not None and self._video_frame is not None
        assert self._encoder_args is not None
        scan = scan_side_data(self._video_stream.side_data, self._video_frame.side_data)

        if scan.mastering_display is not None:
            logger.info("Found HDR10 / HLG")
        # Translate before extracting so malformed metadata fails fast
        self._encoder_args.extend(scan.encoder_args())
        if self.options.seek and (scan.has_dolby_vision or scan.has_hdr10_plus):
            raise InputValidationError(
                "Seeking is not supported for Dolby Vision or HDR10+ input: "
                "the dynamic metadata is extracted from the first frame on"
            )

        if scan.has_dolby_vision:
            logger.info("Found Dolby Vision")
            rpu = self.ledger.create(
                ArtifactKind.DOVI_RPU, JobStage.EXTRACT_HDR, JobStage.INJECT_HDR
            )
            self.side_channel.extract_dolby_vision(self.paths.input, rpu.path)
        if scan.has_hdr10_plus:
            logger.info("Found HDR10+")
            metadata = self.ledger.create(
                ArtifactKind.HDR10_PLUS_JSON, JobStage.EXTRACT_HDR, JobStage.INJECT_HDR
            )
            self.side_channel.extract_hdr10_plus(self.paths.input, metadata.path)

    def _run_transcode_video(self) -> None:
        assert self._encoder_args is not None
        opts = self.options
        self._encoder_args.extend(quality_args(opts.preset, opts.crf))
        self._encoder_args.extend(extra_arg_tokens(opts.extra_args))

        video = self.ledger.create(
            ArtifactKind.VIDEO_STREAM, JobStage.TRANSCODE_VIDEO, JobStage.REMUX
        )
        encode_args = [self.tools.x265, *self._encoder_args.finalize(video.path)]
        tracker = EncodeProgressTracker(self._total_frames)

        def on_encoder_line(line: str) -> None:
            update = tracker.feed(line)
            if update is not None:
                self.progress.on_progress("x265", update.describe())

        logger.info("Starting transcode, this will take a while")
        try:
            run_checked(
                self.runner,
                self._decode_args,
                encode_args,
                TranscodeError,
                "Video transcode failed",
                on_consumer_line=on_encoder_line,
                require_producer=False,
            )
        finally:
            self.progress.on_complete()
        logger.info("Done transcoding")

    def _run_inject_hdr(self) -> None:
        # Dolby Vision goes first; HDR10+ is injected into its output
        injections = (
            (
                ArtifactKind.DOVI_RPU,
                "Dolby Vision",
                self.side_channel.inject_dolby_vision,
            ),
            (
                ArtifactKind.HDR10_PLUS_JSON,
                "HDR10+",
                self.side_channel.inject_hdr10_plus,
            ),
        )
        for kind, label, inject in injections:
            sidecar = self.ledger.latest(kind)
            if sidecar is None:
                continue
            current = self.ledger.latest(ArtifactKind.VIDEO_STREAM)
            assert current is not None
            injected = self.ledger.create(
                ArtifactKind.VIDEO_STREAM, JobStage.INJECT_HDR, JobStage.REMUX
            )
            logger.info("Injecting %s metadata", label)
            inject(current.path, sidecar.path, injected.path)
            self.ledger.release(current)
            self.ledger.release(sidecar)

    def _run_transcode_audio(self, index: int, stream: StreamDescriptor) -> None:
        assert self._probe is not None
        opts = self.options
        self._audio_tags[index] = TrackTagSet.from_stream(stream)
        bitrate = audio_bitrate_kbps(stream, opts.audio_bitrate)
        duration = effective_span(
            resolve_duration(stream, self._probe.format), opts.seek, opts.time_limit
        )
        artifact = self.ledger.create(
            ArtifactKind.AUDIO_STREAM,
            JobStage.TRANSCODE_AUDIO,
            JobStage.REMUX,
            track_index=index,
        )
        label = f"audio {index}"

        def on_decoder_line(line: str) -> None:
            update = parse_audio_progress(line, duration)
            if update is not None:
                self.progress.on_progress(label, update.describe())

        logger.info(
            "Transcoding audio track %d (stream #%d) to Opus at %d kb/s",
            index,
            stream.index,
            bitrate,
        )
        try:
            run_checked(
                self.runner,
                build_audio_decode_args(
                    self.tools.ffmpeg,
                    self.paths.input,
                    index,
                    seek=opts.seek,
                    time_limit=opts.time_limit,
                ),
                build_audio_encode_args(self.tools.opusenc, bitrate, artifact.path),
                TranscodeError,
                f"Audio track {index} transcode failed",
                on_producer_line=on_decoder_line,
            )
        finally:
            self.progress.on_complete()

    def _run_remux(self) -> None:
        video = self.ledger.latest(ArtifactKind.VIDEO_STREAM)
        assert video is not None
        audio = self.ledger.of_kind(ArtifactKind.AUDIO_STREAM)
        audio_tracks = [
            RemuxTrack(a.path, self._audio_tags.get(a.track_index, TrackTagSet()))
            for a in audio
        ]

        excerpt = self._cut_source_tracks()
        source = excerpt.path if excerpt is not None else self.paths.input

        logger.info("Merging source and temp to output")
        try:
            self.remuxer.remux(
                self.paths.output,
                RemuxTrack(video.path, self._video_tags),
                audio_tracks,
                source,
                on_progress=lambda percent: self.progress.on_progress(
                    "mkvmerge", f"{percent}%"
                ),
            )
        finally:
            self.progress.on_complete()
        logger.info("Merge done")

        self.ledger.release(video)
        for artifact in audio:
            self.ledger.release(artifact)
        if excerpt is not None:
            self.ledger.release(excerpt)

    def _cut_source_tracks(self) -> Artifact | None:
        """Copy the kept source tracks over the encoded time window.

        Returns None when the whole source was encoded or when no source
        track besides the video would be kept.
        """
        opts = self.options
        if not opts.seek and opts.time_limit is None:
            return None
        kept = {CodecType.SUBTITLE, CodecType.ATTACHMENT}
        if not opts.transcode_audio:
            kept.add(CodecType.AUDIO)
        assert self._probe is not None
        if not any(s.codec_type in kept for s in self._probe.streams):
            return None

        excerpt = self.ledger.create(
            ArtifactKind.SOURCE_EXCERPT, JobStage.REMUX, JobStage.REMUX
        )
        args = build_source_excerpt_args(
            self.tools.ffmpeg,
            self.paths.input,
            excerpt.path,
            seek=opts.seek,
            time_limit=opts.time_limit,
            drop_audio=opts.transcode_audio,
        )
        logger.info("Cutting source tracks to the encoded window")
        try:
            _, stderr, returncode = run_command(args)
        except FileNotFoundError as e:
            raise RemuxError(
                f"Cutting source tracks failed: executable not found ({args[0]})"
            ) from e
        if returncode != 0:
            raise RemuxError(
                "Cutting source tracks failed",
                returncode=returncode,
                diagnostics=stderr.strip(),
            )
        return excerpt

    def _run_cleanup(self) -> None:
        logger.info("Cleaning up")
        remaining = self.ledger.release_all()
        if remaining:
            logger.warning(
                "Could not remove %d temporary file(s): %s",
                len(remaining),
                ", ".join(str(a.path) for a in remaining),
            )
