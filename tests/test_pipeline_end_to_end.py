"""
Full pipeline: upload -> transcribe -> analyze -> coach, through the HTTP API.
"""

from beanie import PydanticObjectId

from callcoach_backend.models.analysis import Analysis
from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.models.coaching_plan import CoachingPlan
from callcoach_backend.models.transcript import Transcript
from conftest import wav_bytes


class TestPipeline:
    async def test_ten_kilobyte_wav_through_every_stage(self, client, llm_client):
        upload = await client.post(
            "/api/upload",
            files={"audioFile": ("customer-call.wav", wav_bytes(10 * 1024), "audio/wav")},
        )
        assert upload.status_code == 201
        audio_file_id = upload.json()["data"]["id"]

        transcription = await client.post(f"/api/transcript/{audio_file_id}", json={"language": "en"})
        assert transcription.status_code == 201
        transcript_id = transcription.json()["data"]["transcriptId"]

        analysis = await client.post(f"/api/analysis/{transcript_id}")
        assert analysis.status_code == 201
        analysis_id = analysis.json()["data"]["analysisId"]

        llm_client.coaching_response["agentId"] = "agent_001"
        coaching = await client.post(f"/api/coaching/{analysis_id}", json={"agentId": "agent_007"})
        assert coaching.status_code == 201
        plan = coaching.json()["data"]

        # The stored agent is the requested one, whatever the model echoed
        assert plan["agentId"] == "agent_007"

        audio_file = await AudioFile.get(PydanticObjectId(audio_file_id))
        transcript = await Transcript.get(PydanticObjectId(transcript_id))
        stored_analysis = await Analysis.get(PydanticObjectId(analysis_id))
        stored_plan = await CoachingPlan.get(PydanticObjectId(plan["coachingPlanId"]))

        assert audio_file.status == AudioFile.Status.COMPLETED
        assert audio_file.duration == 6.0
        assert transcript.audio_file_id == audio_file.id
        assert stored_analysis.transcript_id == transcript.id
        assert stored_analysis.audio_file_id == audio_file.id
        assert stored_plan.analysis_id == stored_analysis.id
        assert stored_plan.audio_file_id == audio_file.id
        assert stored_plan.agent_id == "agent_007"

        agent_plans = (await client.get("/api/coaching/agent/agent_007")).json()
        assert [p["id"] for p in agent_plans["data"]] == [plan["id"]]

    async def test_each_stage_runs_once(self, client):
        upload = await client.post(
            "/api/upload",
            files={"audioFile": ("repeat.wav", wav_bytes(2048), "audio/wav")},
        )
        audio_file_id = upload.json()["data"]["id"]

        transcript_id = (await client.post(f"/api/transcript/{audio_file_id}")).json()["data"]["id"]
        analysis_id = (await client.post(f"/api/analysis/{transcript_id}")).json()["data"]["id"]
        plan_id = (await client.post(f"/api/coaching/{analysis_id}")).json()["data"]["id"]

        repeats = [
            (await client.post(f"/api/transcript/{audio_file_id}")).json(),
            (await client.post(f"/api/analysis/{transcript_id}")).json(),
            (await client.post(f"/api/coaching/{analysis_id}")).json(),
        ]

        assert [body["data"] for body in repeats] == [
            {"transcriptId": transcript_id, "createdAt": repeats[0]["data"]["createdAt"]},
            {"analysisId": analysis_id, "createdAt": repeats[1]["data"]["createdAt"]},
            {"coachingPlanId": plan_id, "createdAt": repeats[2]["data"]["createdAt"]},
        ]
        assert all(body["success"] is False for body in repeats)
