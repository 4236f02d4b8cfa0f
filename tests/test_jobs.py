from img_engine import jobs


def test_save_and_pop_once():
    job_id = jobs.save_job(b"abc", "foto_compressed.jpeg", "image/jpeg")
    assert jobs.pop_job(job_id) == (b"abc", "foto_compressed.jpeg", "image/jpeg")
    assert jobs.pop_job(job_id) is None


def test_purge_expired_jobs():
    job_id = jobs.save_job(b"abc", "a.png", "image/png")
    data, created, name, mime = jobs.JOBS[job_id]
    jobs.JOBS[job_id] = (data, created - 3600, name, mime)

    jobs.purge_expired_jobs(ttl_minutes=15)
    assert job_id not in jobs.JOBS


def test_purge_skips_job_popped_concurrently(monkeypatch):
    class StaleKeys(dict):
        # simula pop_job de outra thread entre a cópia das chaves e a leitura
        def keys(self):
            return list(super().keys()) + ["ja-baixado"]

    monkeypatch.setattr(jobs, "JOBS", StaleKeys())
    job_id = jobs.save_job(b"abc", "a.png", "image/png")

    jobs.purge_expired_jobs(ttl_minutes=15)
    assert job_id in jobs.JOBS
