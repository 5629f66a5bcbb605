"""
Tests for transcript assembly and progress tracking.
"""

from tubechat.core.assembler import ProgressTracker, TranscriptAssembler
from tubechat.models.schemas import ChunkTranscript, TranscriptSegment


def test_segments_shifted_by_chunk_offset():
    """Test chunk k segments move forward by k times the chunk length."""
    assembler = TranscriptAssembler(max_chunk_duration=600)
    results = [
        ChunkTranscript(index=1, segments=[TranscriptSegment(text="second", start=3.0, end=7.5)]),
        ChunkTranscript(index=0, segments=[TranscriptSegment(text="first", start=0.0, end=4.0)]),
        ChunkTranscript(index=2, segments=[TranscriptSegment(text="third", start=10.0, end=12.0)]),
    ]

    transcript = assembler.assemble(results)

    assert [segment.text for segment in transcript] == ["first", "second", "third"]
    assert [(segment.start, segment.end) for segment in transcript] == [
        (0.0, 4.0),
        (603.0, 607.5),
        (1210.0, 1212.0),
    ]


def test_assembled_transcript_sorted_by_start():
    """Test segments that straddle a chunk boundary still come out in order."""
    assembler = TranscriptAssembler(max_chunk_duration=10)
    results = [
        ChunkTranscript(index=0, segments=[
            TranscriptSegment(text="b", start=9.0, end=11.0),
            TranscriptSegment(text="a", start=2.0, end=3.0),
        ]),
        ChunkTranscript(index=1, segments=[TranscriptSegment(text="c", start=0.0, end=1.0)]),
    ]

    transcript = assembler.assemble(results)

    assert [segment.text for segment in transcript] == ["a", "b", "c"]
    starts = [segment.start for segment in transcript]
    assert starts == sorted(starts)


def test_empty_chunks():
    """Test chunks without speech contribute nothing."""
    assembler = TranscriptAssembler(max_chunk_duration=600)

    assert assembler.assemble([ChunkTranscript(index=0), ChunkTranscript(index=1)]) == []


def test_progress_milestones():
    """Test progress walks through the stage milestones."""
    published = []
    tracker = ProgressTracker(published.append)

    tracker.acquired()
    tracker.extracted()
    tracker.start_chunks(3)
    for _ in range(3):
        tracker.chunk_done()
    tracker.finalizing()
    tracker.complete()

    assert published == [15.0, 30.0, 50.0, 70.0, 90.0, 90.0, 100.0]


def test_progress_never_decreases():
    """Test late or repeated updates cannot move progress backwards."""
    tracker = ProgressTracker()
    tracker.finalizing()
    tracker.acquired()
    assert tracker.progress == 90.0

    tracker.start_chunks(1)
    tracker.chunk_done()
    tracker.chunk_done()
    assert tracker.progress == 90.0
