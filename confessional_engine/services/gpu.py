"""Best-effort GPU detection for health reports."""

import asyncio
import shutil

from ..models.engine import GpuSummary
from ..utils.loguru_config import get_logger

logger = get_logger(__name__)

NVIDIA_SMI_TIMEOUT = 2.0


async def detect_gpu() -> GpuSummary:
    """Describe the local GPU; unknown vendor when it cannot be determined."""
    nvidia_smi = shutil.which("nvidia-smi")
    if nvidia_smi is None:
        return GpuSummary()

    try:
        process = await asyncio.create_subprocess_exec(
            nvidia_smi,
            "--query-gpu=memory.total",
            "--format=csv,noheader,nounits",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"nvidia-smi could not be started: {e!r}")
        return GpuSummary(vendor="nvidia")

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=NVIDIA_SMI_TIMEOUT)
    except asyncio.TimeoutError:
        logger.debug("nvidia-smi query timed out")
        process.kill()
        await process.wait()
        return GpuSummary(vendor="nvidia")

    first_line = stdout.decode(errors="replace").strip().splitlines()[:1]
    try:
        vram_mib = int(first_line[0].strip())
    except (IndexError, ValueError):
        return GpuSummary(vendor="nvidia")
    return GpuSummary(vendor="nvidia", vram_gb=round(vram_mib / 1024))
