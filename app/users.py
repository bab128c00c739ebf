# app/users.py
from flask import Blueprint, request, jsonify, current_app
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from . import bcrypt
from .models import UserIn, user_document, serialize_user, serialize_users, validation_messages


BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password):
    # bcrypt only reads the first 72 bytes; newer releases raise past that
    return password.encode('utf-8')[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password):
    """bcrypt hash using the configured cost factor (BCRYPT_LOG_ROUNDS)."""
    return bcrypt.generate_password_hash(_password_bytes(password)).decode('utf-8')


def verify_password(password_hash, password):
    return bcrypt.check_password_hash(password_hash, _password_bytes(password))


def _validation_failed(error):
    return jsonify({
        'success': False,
        'message': 'Validation failed',
        'errors': validation_messages(error)
    }), 400


def create_users_blueprint(storage):
    """User routes bound to the given Storage."""
    users_bp = Blueprint('users', __name__)

    @users_bp.route('', methods=['GET'])
    def list_users():
        """Returns the list of all users
        ---
        tags:
          - Users
        responses:
          200:
            description: The list of all users
            content:
              application/json:
                schema:
                  type: array
                  items:
                    $ref: '#/components/schemas/User'
          400:
            description: Internal server error
        """
        try:
            user_list = storage.find(storage.users)
        except PyMongoError as e:
            current_app.logger.error(f"Error fetching users: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 400
        return jsonify(serialize_users(user_list)), 200

    @users_bp.route('/<string:user_id>', methods=['GET'])
    def get_user(user_id):
        """Get the user by id
        ---
        tags:
          - Users
        parameters:
          - in: path
            name: user_id
            schema:
              type: string
            required: true
            description: The user id
        responses:
          200:
            description: User Data
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/User'
          400:
            description: Internal server error
          404:
            description: User not found
        """
        try:
            user = storage.find_by_id(storage.users, user_id)
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error fetching user {user_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error'}), 400

        if not user:
            return jsonify({'success': False, 'message': 'User with given ID is not found'}), 404
        return jsonify(serialize_user(user)), 200

    @users_bp.route('', methods=['POST'])
    def create_user():
        """Create a new user
        ---
        tags:
          - Users
        requestBody:
          required: true
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/UserInput'
        responses:
          200:
            description: User successfully created
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/User'
          400:
            description: Failed To Create User
          500:
            description: Internal Server Error
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'message': 'No input data provided'}), 400
        try:
            user_in = UserIn.model_validate(data)
        except ValidationError as e:
            return _validation_failed(e)

        try:
            user = user_document(user_in, hash_password(user_in.password))
            user = storage.save(storage.users, user)
        except Exception as e:
            current_app.logger.error(f"Error creating user: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error!'}), 500

        if not user:
            return jsonify({'success': False, 'message': 'Failed to create user!'}), 400

        current_app.logger.info(f"User {user['_id']} created successfully.")
        return jsonify(serialize_user(user)), 200

    @users_bp.route('/<string:user_id>', methods=['PUT'])
    def update_user(user_id):
        """Update the user by the id
        ---
        tags:
          - Users
        parameters:
          - in: path
            name: user_id
            schema:
              type: string
            required: true
            description: User id
        requestBody:
          required: true
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/UserInput'
        responses:
          200:
            description: User successfully updated!
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/User'
          400:
            description: Invalid user data
          404:
            description: User with given ID is not found!
          500:
            description: Internal Server Error!
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'message': 'No input data provided'}), 400
        try:
            user_in = UserIn.model_validate(data)
        except ValidationError as e:
            return _validation_failed(e)

        # Every mutable field is overwritten, the password is always re-hashed
        try:
            user = storage.find_by_id_and_update(
                storage.users,
                user_id,
                user_document(user_in, hash_password(user_in.password))
            )
        except Exception as e:
            current_app.logger.error(f"Error updating user {user_id}: {str(e)}")
            return jsonify({'success': False, 'message': 'Internal Server Error!'}), 500

        if not user:
            return jsonify({'success': False, 'message': 'User with given ID is not found!'}), 404
        return jsonify(serialize_user(user)), 200

    @users_bp.route('/<string:user_id>', methods=['DELETE'])
    def delete_user(user_id):
        """Remove the user by id
        ---
        tags:
          - Users
        parameters:
          - in: path
            name: user_id
            schema:
              type: string
            required: true
            description: User id
        responses:
          200:
            description: User successfully deleted!
            content:
              application/json:
                schema:
                  $ref: '#/components/schemas/Envelope'
          400:
            description: Invalid id or storage error
          404:
            description: User not found!
        """
        try:
            deleted_user = storage.find_by_id_and_remove(storage.users, user_id)
        except (InvalidId, PyMongoError) as e:
            current_app.logger.error(f"Error deleting user {user_id}: {str(e)}")
            return jsonify({'success': False, 'error': str(e)}), 400

        if not deleted_user:
            return jsonify({'success': False, 'message': 'User not found!'}), 404

        current_app.logger.info(f"User {user_id} deleted.")
        return jsonify({'success': True, 'message': 'User successfully deleted!'}), 200

    return users_bp
