from dataclasses import dataclass, field
from typing import Dict, List
import json

@dataclass
class APIMetrics:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    response_times: List[float] = field(default_factory=list)
    errors_by_type: Dict[str, int] = field(default_factory=dict)
    requests_by_endpoint: Dict[str, int] = field(default_factory=dict)

    def record_request(self, endpoint: str):
        self.total_requests += 1
        self.requests_by_endpoint[endpoint] = self.requests_by_endpoint.get(endpoint, 0) + 1

    def record_success(self, response_time: float):
        self.successful_requests += 1
        self.response_times.append(response_time)

    def record_failure(self, error: Exception):
        self.failed_requests += 1
        error_type = type(error).__name__
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    @property
    def average_response_time(self) -> float:
        return sum(self.response_times) / len(self.response_times) if self.response_times else 0

    def to_json(self) -> str:
        return json.dumps({
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'average_response_time': self.average_response_time,
            'errors_by_type': self.errors_by_type,
            'requests_by_endpoint': self.requests_by_endpoint
        })
