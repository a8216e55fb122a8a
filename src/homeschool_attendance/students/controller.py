from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_owner, json_body, login_required
from ..container import Container
from .model import StudentPatch, StudentProfile

_PROFILE_FIELDS = ("name", "dob", "address", "city", "state", "zip_code", "school_id")


def register(app: Flask, container: Container) -> None:
    store = container.store

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @login_required
    def list_students():
        students = store.list_students(current_owner())
        return jsonify({"students": [s.to_dict() for s in students]})

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @login_required
    def create_student():
        data = json_body()
        profile = StudentProfile(user_id=current_owner(), **{k: data.get(k) for k in _PROFILE_FIELDS})
        student = store.create_student(profile)
        return jsonify({"student": student.to_dict()}), 201

    @app.route("/api/students/<student_id>", methods=["PATCH"], endpoint="update_student")
    @login_required
    def update_student(student_id: str):
        patch = StudentPatch.from_mapping(json_body())
        owner = current_owner()
        store.update_student(student_id, patch, owner_id=owner)
        return jsonify({"student": store.get_student(student_id, owner_id=owner).to_dict()})

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="delete_student")
    @login_required
    def delete_student(student_id: str):
        store.delete_student(student_id, owner_id=current_owner())
        return "", 204
