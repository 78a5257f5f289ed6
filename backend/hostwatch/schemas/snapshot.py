from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class CamelModel(BaseModel):
    """Immutable model serialized with the dashboard's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CoreUtilization(CamelModel):
    usage: float = 0.0  # Percentage 0-100


class CpuSample(CamelModel):
    usage: float = 0.0
    cores: int = 0
    core_utilizations: list[CoreUtilization] = Field(default_factory=list, alias="coreUtilizations")


class MemorySample(CamelModel):
    total: int = 0  # MB
    used: int = 0
    free: int = 0
    available: int = 0
    percentage: float = 0.0


class GpuSample(CamelModel):
    power_draw: float = Field(0.0, alias="powerDraw")  # Watts
    power_limit: float = Field(0.0, alias="powerLimit")
    utilization: float = 0.0
    memory_used: float = Field(0.0, alias="memoryUsed")  # MB
    memory_total: float = Field(0.0, alias="memoryTotal")


class RootUsage(CamelModel):
    total: int  # MB
    used: int
    free: int
    percentage: float
    human_size: str | None = Field(None, alias="humanSize")
    human_used: str | None = Field(None, alias="humanUsed")
    human_free: str | None = Field(None, alias="humanFree")

    @model_serializer(mode="wrap")
    def _omit_missing_human_sizes(self, handler):
        # Only the df tier reports human-readable sizes; other tiers leave the keys out
        return {key: value for key, value in handler(self).items() if value is not None}


class BlockDevice(CamelModel):
    path: str
    mount_point: str = Field(alias="mountPoint")
    total: int  # MB
    used: int
    free: int
    percentage: int
    human_size: str = Field(alias="humanSize")
    human_used: str = Field(alias="humanUsed")
    human_free: str = Field(alias="humanFree")


class DiskSample(CamelModel):
    root: RootUsage
    nvme_devices: list[BlockDevice] = Field(default_factory=list, alias="nvmeDevices")
    total_nvme_count: int = Field(0, alias="totalNvmeCount")


class NetworkInterface(CamelModel):
    iface: str
    rx_kBs: float = 0.0
    tx_kBs: float = 0.0


class NetworkSample(CamelModel):
    interfaces: list[NetworkInterface] = Field(default_factory=list)


class DockerContainer(CamelModel):
    id: str
    name: str = "<unnamed>"
    image: str = "unknown"
    status: str = "unknown"
    ports: list[str] = Field(default_factory=list)


class DockerSample(CamelModel):
    containers: list[DockerContainer] = Field(default_factory=list)


class SystemSample(CamelModel):
    load_average: tuple[float, float, float] = Field((0.0, 0.0, 0.0), alias="loadAverage")
    free_memory: int = Field(0, alias="freeMemory")  # Bytes
    total_memory: int = Field(0, alias="totalMemory")


class SourceInfo(CamelModel):
    status: str  # success | degraded | empty
    tier: str = ""
    reason: str | None = None


class Snapshot(CamelModel):
    timestamp: str  # ISO-8601
    cpu: CpuSample
    memory: MemorySample
    gpus: list[GpuSample] = Field(default_factory=list)
    disk: DiskSample
    network: NetworkSample
    docker: DockerSample
    system: SystemSample
    sources: dict[str, SourceInfo] = Field(default_factory=dict)


class MonitoringErrorResponse(BaseModel):
    error: str
    details: str
