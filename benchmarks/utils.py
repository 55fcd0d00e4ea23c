# benchmarks/utils.py
import os
import sys
import threading
import time

import psutil

# Add the project root to the Python path to allow importing 'pipemat'
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


class ResourceMonitor(threading.Thread):
    """A thread that samples CPU and memory usage of a process while a run executes."""
    def __init__(self, process, interval=0.05):
        super().__init__(daemon=True)
        self.process = process
        self.interval = interval
        self.running = True
        self.peak_memory_mb = 0
        self.cpu_percents = []

    def run(self):
        while self.running:
            try:
                memory_mb = self.process.memory_info().rss / (1024 * 1024)
                self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
                # cpu_percent blocks for the interval, so no extra sleep
                self.cpu_percents.append(self.process.cpu_percent(interval=self.interval))
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                break

    def stop(self):
        self.running = False
        self.join()
        avg_cpu = sum(self.cpu_percents) / len(self.cpu_percents) if self.cpu_percents else 0
        return self.peak_memory_mb, avg_cpu


class Benchmark:
    """A context manager timing one benchmark case and monitoring its resource usage."""
    def __init__(self, description):
        self.description = description
        self.monitor = None
        self.start_time = 0
        self.elapsed = 0
        self.peak_mem = 0
        self.avg_cpu = 0

    def __enter__(self):
        self.monitor = ResourceMonitor(psutil.Process(os.getpid()))
        self.monitor.start()
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.elapsed = time.perf_counter() - self.start_time
        self.peak_mem, self.avg_cpu = self.monitor.stop()
