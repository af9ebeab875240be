"""Switchboard oracle program: resources, codecs and entry points."""
from .actions import AggregatorParams, OracleQueueParams, SwitchboardProgram
from .decimal import MAX_SCALE, AptosDecimal
from .job_codec import (
    decode_delimited,
    decode_job_hex,
    encode_delimited,
    encode_job_hex,
    iter_delimited,
)
from .resources import Aggregator, Job, ResourceHandle, State, load_balance

__all__ = [
    "Aggregator",
    "AggregatorParams",
    "AptosDecimal",
    "Job",
    "MAX_SCALE",
    "OracleQueueParams",
    "ResourceHandle",
    "State",
    "SwitchboardProgram",
    "decode_delimited",
    "decode_job_hex",
    "encode_delimited",
    "encode_job_hex",
    "iter_delimited",
    "load_balance",
]
