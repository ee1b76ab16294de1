"""Tests for profile summaries and chat replies."""

from __future__ import annotations


class TestNarrativeSummarizer:
    def test_returns_llm_text(self, make_llm, sample_answers):
        from ecocoach.coach.summarizer import NarrativeSummarizer
        from ecocoach.profile.store import ProfileStore

        store = ProfileStore()
        profile = store.create("u1", sample_answers)
        llm = make_llm("You're doing great on food choices.")

        summary = NarrativeSummarizer(llm).summarize(profile)

        assert summary == "You're doing great on food choices."
        assert "waste management: 0/100" in llm.calls[0][1]["content"]

    def test_failure_returns_fixed_sentence(self, make_llm, sample_answers):
        from ecocoach.coach.summarizer import NarrativeSummarizer
        from ecocoach.profile.store import ProfileStore

        profile = ProfileStore().create("u1", sample_answers)

        summary = NarrativeSummarizer(make_llm(ConnectionError("down"))).summarize(profile)

        assert summary == (
            "Here's your sustainability profile! Your overall score is 42/100. "
            "Let's work together to improve your environmental impact."
        )

    def test_blank_reply_falls_back(self, make_llm, sample_answers):
        from ecocoach.coach.summarizer import NarrativeSummarizer
        from ecocoach.profile.store import ProfileStore

        profile = ProfileStore().create("u1", sample_answers)

        summary = NarrativeSummarizer(make_llm("   ")).summarize(profile)

        assert summary.startswith("Here's your sustainability profile!")


class TestCoachChat:
    def test_reply_with_profile_context(self, make_llm, sample_answers):
        from ecocoach.coach.chat import CoachChat
        from ecocoach.profile.store import ProfileStore

        profile = ProfileStore().create("u1", sample_answers)
        llm = make_llm("Try a shorter shower.")

        reply = CoachChat(llm).respond(profile, "  How do I save water?  ")

        assert reply == "Try a shorter shower."
        assert "How do I save water?" in llm.calls[0][1]["content"]

    def test_reply_without_profile(self, make_llm):
        from ecocoach.coach.chat import CoachChat

        reply = CoachChat(make_llm("Welcome!")).respond(None, "hello")

        assert reply == "Welcome!"

    def test_blank_message_skips_llm(self, make_llm):
        from ecocoach.coach.chat import FALLBACK_REPLY, CoachChat

        llm = make_llm()

        assert CoachChat(llm).respond(None, "   ") == FALLBACK_REPLY
        assert llm.calls == []

    def test_failure_returns_fallback(self, make_llm):
        from ecocoach.coach.chat import FALLBACK_REPLY, CoachChat

        assert CoachChat(make_llm(ConnectionError("down"))).respond(None, "hi") == FALLBACK_REPLY
