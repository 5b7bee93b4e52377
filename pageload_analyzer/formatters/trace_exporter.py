"""
Export of analysed samples as one Chrome JSON trace, for side-by-side viewing.
"""

from typing import Any, Dict, List, Sequence, Tuple

from ..core.types import as_micros


def export_combined_trace(analyses: Sequence[Tuple[str, Sequence[Any]]]) -> Dict[str, Any]:
    """
    Lay out several analyses as processes and their samples as threads.

    Args:
        analyses: (label, samples) pairs; each sample provides all_events()

    Returns:
        Chrome trace object with process_name and thread_name metadata
        events and one complete ("X") event per sample event, in µs

    Raises:
        AnalysisError: If a sample's synthetic events cannot be derived
    """
    trace_events: List[Dict[str, Any]] = []
    for pid, (label, samples) in enumerate(analyses):
        trace_events.append({
            'ph': 'M',
            'name': 'process_name',
            'cat': '__metadata',
            'pid': pid,
            'tid': 0,
            'ts': 0,
            'args': {'name': label},
        })
        for tid, sample in enumerate(samples):
            trace_events.append({
                'ph': 'M',
                'name': 'thread_name',
                'cat': '__metadata',
                'pid': pid,
                'tid': tid,
                'ts': 0,
                'args': {'name': f"Sample {tid}"},
            })
            for event in sample.all_events():
                entry = {
                    'ph': 'X',
                    'name': event.name,
                    'cat': 'content',
                    'pid': pid,
                    'tid': tid,
                    'ts': as_micros(event.start),
                }
                if event.duration is not None:
                    entry['dur'] = as_micros(event.duration)
                trace_events.append(entry)

    return {'traceEvents': trace_events}
